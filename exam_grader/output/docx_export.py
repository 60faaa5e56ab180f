"""
Word export of question banks using python-docx.

Renders questions as a numbered, printable document: prompts with light
Markdown and LaTeX support, lettered options for multiple choice, answer
space for written questions and an optional answer key.
"""

import logging
import re
import string
from pathlib import Path
from typing import Sequence

from docx import Document
from docx.document import Document as DocumentObject
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Pt, RGBColor
from docx.text.paragraph import Paragraph

from exam_grader.models import Question, QuestionType

logger = logging.getLogger(__name__)

LATEX_REPLACEMENTS: dict[str, str] = {
    # Greek
    r"\alpha": "α", r"\beta": "β", r"\gamma": "γ", r"\delta": "δ", r"\epsilon": "ε",
    r"\zeta": "ζ", r"\eta": "η", r"\theta": "θ", r"\iota": "ι", r"\kappa": "κ",
    r"\lambda": "λ", r"\mu": "μ", r"\nu": "ν", r"\xi": "ξ", r"\pi": "π",
    r"\rho": "ρ", r"\sigma": "σ", r"\tau": "τ", r"\upsilon": "υ", r"\phi": "φ",
    r"\chi": "χ", r"\psi": "ψ", r"\omega": "ω",
    r"\Delta": "Δ", r"\Gamma": "Γ", r"\Theta": "Θ", r"\Lambda": "Λ", r"\Xi": "Ξ",
    r"\Pi": "Π", r"\Sigma": "Σ", r"\Phi": "Φ", r"\Psi": "Ψ", r"\Omega": "Ω",
    # Symbols
    r"\circ": "°", r"\times": "×", r"\cdot": "·", r"\pm": "±", r"\mp": "∓",
    r"\approx": "≈", r"\neq": "≠", r"\leq": "≤", r"\geq": "≥", r"\infty": "∞",
    r"\rightarrow": "→", r"\leftarrow": "←", r"\Rightarrow": "⇒", r"\Leftrightarrow": "⇔",
    r"\partial": "∂", r"\nabla": "∇", r"\forall": "∀", r"\exists": "∃",
    r"\notin": "∉", r"\in": "∈", r"\subset": "⊂", r"\supset": "⊃", r"\cup": "∪", r"\cap": "∩",
    # Spacing
    r"\qquad": "    ", r"\quad": "  ", r"\,": " ", r"\;": " ",
}

SUPERSCRIPTS: dict[str, str] = {
    "0": "⁰", "1": "¹", "2": "²", "3": "³", "4": "⁴", "5": "⁵", "6": "⁶", "7": "⁷",
    "8": "⁸", "9": "⁹", "+": "⁺", "-": "⁻", "=": "⁼", "(": "⁽", ")": "⁾", "n": "ⁿ",
}

# Inline Markdown tokens: **bold**, *italic*, `code`, $math$
INLINE_PATTERN = re.compile(r"(\*\*[^*]+\*\*|\*[^*]+\*|`[^`]+`|\$[^$]+\$)")

WRAPPER_PATTERN = re.compile(r"\\(?:text|mathbf|mathit|mathrm)\s*\{([^}]+)\}")

# Word commands must not match a prefix of a longer command (\in vs \infty)
_LATEX_PATTERN = re.compile(
    "|".join(
        re.escape(k) + ("(?![a-zA-Z])" if k[-1].isalpha() else "")
        for k in sorted(LATEX_REPLACEMENTS, key=len, reverse=True)
    )
)


class ExportError(Exception):
    """Raised when a question bank cannot be exported."""


def latex_to_text(expression: str) -> str:
    """Approximate a LaTeX expression with plain Unicode text."""
    cleaned = WRAPPER_PATTERN.sub(r"\1", expression)
    cleaned = re.sub(r"\^\{\\circ\}|\^\\circ", "°", cleaned)
    cleaned = _LATEX_PATTERN.sub(lambda m: LATEX_REPLACEMENTS[m.group(0)], cleaned)
    cleaned = re.sub(r"\^([0-9+\-=()n])", lambda m: SUPERSCRIPTS[m.group(1)], cleaned)
    cleaned = re.sub(r"\\([a-zA-Z]+)", r"\1", cleaned)
    cleaned = re.sub(r"\{([^}]+)\}", r"\1", cleaned)
    return cleaned


def default_filename(title: str) -> str:
    """File name derived from the export title."""
    return re.sub(r"[^a-z0-9]", "_", title, flags=re.IGNORECASE).lower() + ".docx"


class QuestionExporter:
    """
    Exports question bank entries to a Word document.

    Layout per question:
    1. Numbered prompt followed by its points
    2. Lettered options for multiple choice questions
    3. Blank answer space for written questions, "True / False" for true/false
    """

    BODY_FONT_SIZE = Pt(12)
    CODE_FONT = "Courier New"
    MATH_FONT = "Cambria Math"

    def export(
        self,
        questions: Sequence[Question],
        output_path: Path,
        title: str = "Question Export",
        include_answers: bool = False,
    ) -> Path:
        """
        Write questions to a .docx file.

        Args:
            questions: Questions in the order they should appear.
            output_path: Target file, or a directory to place a file named after the title.
            title: Document title.
            include_answers: Append an answer key after the questions.

        Returns:
            Path to the written document.

        Raises:
            ExportError: If there is nothing to export or the file cannot be written.
        """
        if not questions:
            raise ExportError("No questions to export")

        if output_path.is_dir():
            output_path = output_path / default_filename(title)

        doc = Document()
        heading = doc.add_heading(title, level=0)
        heading.alignment = WD_ALIGN_PARAGRAPH.CENTER

        for number, question in enumerate(questions, start=1):
            self._add_question(doc, number, question)

        if include_answers:
            self._add_answer_key(doc, questions)

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            doc.save(str(output_path))
        except OSError as e:
            raise ExportError(f"Could not write '{output_path}': {e}") from e

        logger.info("Exported %d questions to %s", len(questions), output_path)
        return output_path

    def _add_question(self, doc: DocumentObject, number: int, question: Question) -> None:
        lines = [line for line in question.prompt_md.splitlines() if line.strip()]
        if not lines:
            lines = ["Empty Question"]

        first = doc.add_paragraph()
        first.add_run(f"{number}. ").bold = True
        self._add_inline(first, re.sub(r"^#{1,6}\s+", "", lines[0].strip()))
        points_run = first.add_run(f"  ({question.points} pts)")
        points_run.italic = True
        points_run.font.size = Pt(10)

        for line in lines[1:]:
            paragraph = doc.add_paragraph()
            paragraph.paragraph_format.left_indent = Pt(36)
            self._add_block(paragraph, line)

        question_type = QuestionType.lookup(question.type)
        if question_type in (QuestionType.MCQ_SINGLE, QuestionType.MCQ_MULTI):
            for letter, option in zip(string.ascii_lowercase, question.options):
                paragraph = doc.add_paragraph()
                paragraph.paragraph_format.left_indent = Pt(72)
                paragraph.add_run(f"{letter}. ")
                self._add_inline(paragraph, option.text_md)
        elif question_type in (QuestionType.ESSAY, QuestionType.SHORT_TEXT, QuestionType.CANVAS):
            space = doc.add_paragraph()
            space.paragraph_format.space_after = Pt(50)
        elif question_type is QuestionType.TRUE_FALSE:
            paragraph = doc.add_paragraph()
            paragraph.paragraph_format.left_indent = Pt(72)
            paragraph.add_run("True / False").font.size = self.BODY_FONT_SIZE

        doc.add_paragraph()

    def _add_answer_key(self, doc: DocumentObject, questions: Sequence[Question]) -> None:
        doc.add_page_break()
        doc.add_heading("Answer Key", level=1)

        for number, question in enumerate(questions, start=1):
            paragraph = doc.add_paragraph()
            paragraph.add_run(f"{number}. ").bold = True
            paragraph.add_run(self._describe_answer(question))

    def _describe_answer(self, question: Question) -> str:
        """Readable form of the correct answer, using option letters where possible."""
        question_type = QuestionType.lookup(question.type)
        correct = question.correct_answer

        if question_type in (QuestionType.ESSAY, QuestionType.CANVAS) or question_type is None:
            return "Manually graded"
        if correct is None:
            return "No answer defined"

        letters = {opt.id: letter for letter, opt in zip(string.ascii_lowercase, question.options)}
        if question_type is QuestionType.MCQ_SINGLE:
            return letters.get(str(correct), str(correct))
        if question_type is QuestionType.MCQ_MULTI and isinstance(correct, (list, tuple)):
            return ", ".join(sorted(letters.get(str(c), str(c)) for c in correct))
        if question_type is QuestionType.TRUE_FALSE:
            return str(correct).capitalize()
        if question_type is QuestionType.NUMERIC and question.numeric_tolerance:
            return f"{correct} (± {question.numeric_tolerance})"
        if isinstance(correct, (list, tuple)):
            return " / ".join(str(c) for c in correct)
        return str(correct)

    def _add_block(self, paragraph: Paragraph, line: str) -> None:
        """Render one prompt line: headings, bullets, block math or plain text."""
        stripped = line.strip()

        if stripped.startswith("$$") and stripped.endswith("$$") and len(stripped) > 4:
            paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
            run = paragraph.add_run(latex_to_text(stripped[2:-2].strip()))
            run.font.name = self.MATH_FONT
            run.italic = True
            return

        heading = re.match(r"^#{1,6}\s+(.*)$", stripped)
        if heading:
            self._add_inline(paragraph, heading.group(1), bold=True)
            return

        bullet = re.match(r"^[-*+]\s+(.*)$", stripped)
        if bullet:
            paragraph.add_run("• ")
            self._add_inline(paragraph, bullet.group(1))
            return

        self._add_inline(paragraph, stripped)

    def _add_inline(self, paragraph: Paragraph, text: str, bold: bool = False) -> None:
        """Render inline Markdown into runs."""
        for token in INLINE_PATTERN.split(text):
            if not token:
                continue

            if token.startswith("**") and token.endswith("**") and len(token) > 4:
                run = paragraph.add_run(token[2:-2])
                run.bold = True
            elif token.startswith("`") and token.endswith("`") and len(token) > 2:
                run = paragraph.add_run(token[1:-1])
                run.font.name = self.CODE_FONT
                run.font.color.rgb = RGBColor(0xD0, 0x1F, 0x68)
                run.bold = bold
            elif token.startswith("$") and token.endswith("$") and len(token) > 2:
                run = paragraph.add_run(f" {latex_to_text(token[1:-1])} ")
                run.font.name = self.MATH_FONT
                run.italic = True
                run.bold = bold
            elif token.startswith("*") and token.endswith("*") and len(token) > 2:
                run = paragraph.add_run(token[1:-1])
                run.italic = True
                run.bold = bold
            else:
                run = paragraph.add_run(token)
                run.bold = bold
            run.font.size = self.BODY_FONT_SIZE
