"""Data validation helpers.

Functions:
- validate_text_input(value, max_length) -> (valid, error): Inline form check
- validate_score(score, low, high) -> int: Range-checked numeric input
- resolve_student_id(prefix, candidates) -> str: Resolve prefix to unique student_id
- generate_id(prefix) -> str: Short random identifier
"""

from __future__ import annotations

import uuid


class AmbiguousStudentIdError(Exception):
    """Raised when a student_id prefix matches multiple students."""

    def __init__(self, prefix: str, candidates: list[str]):
        self.prefix = prefix
        self.candidates = candidates
        super().__init__(
            f"Prefix '{prefix}' is ambiguous. Candidates:\n"
            + "\n".join(f"  - {c}" for c in candidates)
        )


class StudentNotFoundError(Exception):
    """Raised when no student matches the given prefix."""

    def __init__(self, prefix: str):
        self.prefix = prefix
        super().__init__(f"No student found with prefix '{prefix}'")


def validate_text_input(value: str | None, max_length: int = 200) -> tuple[bool, str | None]:
    """Validate a required free-text field.

    Args:
        value: Raw user input
        max_length: Maximum allowed length

    Returns:
        (valid, error) tuple; error is None when valid
    """
    if value is None or not value.strip():
        return False, "This field is required"
    if len(value) > max_length:
        return False, f"Must be less than {max_length} characters"
    return True, None


def validate_score(score: int | float, low: int = 1, high: int = 5) -> int:
    """Validate a numeric rating against an inclusive range.

    Raises:
        ValueError: If the score is outside [low, high]
    """
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        raise ValueError(f"Score must be a number, got {score!r}")
    if score < low or score > high:
        raise ValueError(f"Score must be between {low} and {high}, got {score}")
    return int(score)


def resolve_student_id(prefix: str, candidates: list[str]) -> str:
    """Resolve a student_id prefix to a unique full student_id.

    Args:
        prefix: Partial or full student_id
        candidates: List of all known student_ids

    Returns:
        The unique matching student_id

    Raises:
        StudentNotFoundError: If no candidates match the prefix
        AmbiguousStudentIdError: If multiple candidates match the prefix
    """
    # Exact match first
    if prefix in candidates:
        return prefix

    matches = [c for c in candidates if c.startswith(prefix)]

    if len(matches) == 0:
        raise StudentNotFoundError(prefix)
    elif len(matches) == 1:
        return matches[0]
    else:
        raise AmbiguousStudentIdError(prefix, matches)


def generate_id(prefix: str = "") -> str:
    """Generate a short identifier, optionally prefixed."""
    short = uuid.uuid4().hex[:8]
    return f"{prefix}-{short}" if prefix else short
