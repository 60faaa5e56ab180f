"""
Answer comparators for auto-gradable question types.

Each comparator receives the reference answer and the student's answer
exactly as stored and returns whether they match. Values of the wrong
shape never raise; they simply do not match.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Any

_SEQUENCE_TYPES = (list, tuple, set, frozenset)

# Longer answers are not searched with /pattern/ references
MAX_REGEX_ANSWER_LENGTH = 500


def _int_to_str(value: int) -> str | None:
    """Stringify an int, or None when it exceeds the interpreter's digit limit."""
    try:
        return str(value)
    except ValueError:
        return None


def _as_option_id(value: Any) -> str | None:
    """Option ids are strings; integer ids are accepted and stringified."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, int):
        return _int_to_str(value)
    return None


def _as_option_set(value: Any) -> frozenset[str] | None:
    if not isinstance(value, _SEQUENCE_TYPES):
        return None
    ids = [_as_option_id(item) for item in value]
    if any(i is None for i in ids):
        return None
    return frozenset(ids)  # type: ignore[arg-type]


def _as_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "false"):
            return lowered == "true"
    return None


def as_number(value: Any) -> Decimal | None:
    """
    Interpret a stored value as a finite number.

    Accepts ints, floats, Decimals and numeric strings. Booleans,
    NaN and infinities are rejected.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, int):
        number = Decimal(value)
    elif isinstance(value, (float, str)):
        try:
            number = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return None
    else:
        return None
    return number if number.is_finite() else None


def _as_text(value: Any) -> str | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, int):
        return _int_to_str(value)
    if isinstance(value, (float, Decimal)):
        return str(value)
    return None


def _acceptable_texts(value: Any) -> list[str]:
    """A short text reference is a single string or a list of alternatives."""
    if isinstance(value, str):
        return [value]
    if isinstance(value, _SEQUENCE_TYPES):
        return [v for v in value if isinstance(v, str)]
    return []


# ==============================================================================
# Comparators
# ==============================================================================


def match_single_choice(correct: Any, answer: Any) -> bool:
    """Single choice: the selected option id equals the correct one."""
    correct_id = _as_option_id(correct)
    answer_id = _as_option_id(answer)
    return correct_id is not None and correct_id == answer_id


def match_multi_choice(correct: Any, answer: Any) -> bool:
    """Multiple selection: the selected set equals the correct set exactly."""
    correct_ids = _as_option_set(correct)
    answer_ids = _as_option_set(answer)
    if not correct_ids or answer_ids is None:
        return False
    return correct_ids == answer_ids


def match_true_false(correct: Any, answer: Any) -> bool:
    """True/false: both sides are booleans (or "true"/"false") and equal."""
    correct_bool = _as_bool(correct)
    answer_bool = _as_bool(answer)
    return correct_bool is not None and correct_bool == answer_bool


def match_numeric(correct: Any, answer: Any, tolerance: Decimal = Decimal(0)) -> bool:
    """Numeric: the answer lies within `tolerance` of the reference value."""
    correct_num = as_number(correct)
    answer_num = as_number(answer)
    if correct_num is None or answer_num is None:
        return False
    try:
        difference = abs(answer_num - correct_num)
    except ArithmeticError:
        # Exponent out of the context's range
        return False
    return difference <= tolerance


def normalize_text(text: str, case_sensitive: bool = False, collapse_whitespace: bool = False) -> str:
    """Trim, optionally collapse whitespace and case-fold a short text answer."""
    text = text.strip()
    if collapse_whitespace:
        text = re.sub(r"\s+", " ", text)
    if not case_sensitive:
        text = text.casefold()
    return text


def _regex_pattern(reference: str) -> str | None:
    """Return the pattern of a /pattern/ reference, or None for a plain reference."""
    stripped = reference.strip()
    if len(stripped) > 2 and stripped.startswith("/") and stripped.endswith("/"):
        return stripped[1:-1]
    return None


def match_short_text(
    correct: Any,
    answer: Any,
    case_sensitive: bool = False,
    collapse_whitespace: bool = False,
    allow_regex: bool = True,
) -> bool:
    """
    Short text: the answer matches any acceptable reference.

    Plain references are compared after normalisation. A reference written
    as /pattern/ is searched in the trimmed answer as a regular expression;
    a pattern that fails to compile is compared as plain text instead.

    Patterns come from the exam author and are run with the standard `re`
    engine, which has no timeout. Answers longer than
    MAX_REGEX_ANSWER_LENGTH never match a pattern, which bounds the input
    but not the backtracking of nested quantifiers such as `(a+)+`.
    """
    answer_text = _as_text(answer)
    if answer_text is None:
        return False

    normalized_answer = normalize_text(answer_text, case_sensitive, collapse_whitespace)
    return any(
        _match_reference(reference, answer_text, normalized_answer, case_sensitive, collapse_whitespace, allow_regex)
        for reference in _acceptable_texts(correct)
    )


def _match_reference(
    reference: str,
    answer_text: str,
    normalized_answer: str,
    case_sensitive: bool,
    collapse_whitespace: bool,
    allow_regex: bool,
) -> bool:
    pattern = _regex_pattern(reference) if allow_regex else None
    if pattern is not None:
        flags = 0 if case_sensitive else re.IGNORECASE
        try:
            compiled = re.compile(pattern, flags)
        except re.error:
            compiled = None
        if compiled is not None:
            subject = answer_text.strip()
            if len(subject) > MAX_REGEX_ANSWER_LENGTH:
                return False
            return compiled.search(subject) is not None

    normalized_reference = normalize_text(reference, case_sensitive, collapse_whitespace)
    if not normalized_reference:
        return False
    return normalized_reference == normalized_answer
