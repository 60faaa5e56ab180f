"""
Grading report generation.

Renders a grading result (and the submission outcome, when there is one)
as JSON for machines or Markdown for people.
"""

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any

from exam_grader.models import GradedAnswer, GradingResult, SubmissionOutcome

logger = logging.getLogger(__name__)


class ReportFormat(str, Enum):
    """Output format of a grading report."""

    JSON = "json"
    MARKDOWN = "markdown"


class ReportGenerator:
    """Generates and saves grading reports."""

    EXTENSIONS = {ReportFormat.JSON: ".json", ReportFormat.MARKDOWN: ".md"}

    def generate(
        self,
        result: GradingResult,
        format: ReportFormat = ReportFormat.JSON,
        outcome: SubmissionOutcome | None = None,
    ) -> str:
        """
        Render a report.

        Args:
            result: The grading result.
            format: Output format.
            outcome: Submission outcome to include, if the attempt was submitted.

        Returns:
            The report text.
        """
        if format is ReportFormat.MARKDOWN:
            return self._generate_markdown(result, outcome)
        return self._generate_json(result, outcome)

    def save(
        self,
        result: GradingResult,
        output_path: Path,
        format: ReportFormat = ReportFormat.JSON,
        outcome: SubmissionOutcome | None = None,
    ) -> Path:
        """
        Write a report to disk.

        A missing file extension is filled in from the format.

        Returns:
            Path to the written report.
        """
        if not output_path.suffix:
            output_path = output_path.with_suffix(self.EXTENSIONS[format])

        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(self.generate(result, format, outcome), encoding="utf-8")

        logger.info("Report written to %s", output_path)
        return output_path

    def _generate_json(self, result: GradingResult, outcome: SubmissionOutcome | None) -> str:
        data: dict[str, Any] = result.model_dump(mode="json")
        if outcome is not None:
            data["submission"] = outcome.model_dump(mode="json", exclude={"graded_answers"})
        return json.dumps(data, indent=2, ensure_ascii=False)

    def _generate_markdown(self, result: GradingResult, outcome: SubmissionOutcome | None) -> str:
        lines = [
            "# Grading Report",
            "",
            f"**Score:** {result.total_score} / {result.max_score} "
            f"({result.percentage_score:.1f}%)",
            f"**Status:** {result.status.value}",
        ]

        if result.has_manual_grading:
            lines.append("")
            lines.append("> Some questions require manual grading; the score is provisional.")

        if outcome is not None:
            lines.extend(
                [
                    "",
                    f"**Attempt:** {outcome.attempt_id}",
                    f"**Submitted at:** {outcome.submitted_at.isoformat()}",
                    f"**Time taken:** {outcome.time_taken_seconds}s",
                ]
            )

        lines.extend(
            [
                "",
                "## Questions",
                "",
                "| # | Question | Result | Points |",
                "|---|----------|--------|--------|",
            ]
        )
        for number, answer in enumerate(result.graded_answers, start=1):
            lines.append(
                f"| {number} | {answer.question_id} | {_verdict(answer)} "
                f"| {answer.points_awarded}/{answer.max_points} |"
            )

        return "\n".join(lines) + "\n"


def _verdict(answer: GradedAnswer) -> str:
    if answer.needs_manual_grading:
        return "Manual grading"
    return "Correct" if answer.is_correct else "Incorrect"
