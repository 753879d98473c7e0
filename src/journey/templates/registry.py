"""Template Registry - Load message templates from external files.

Parent communication templates live as Markdown files under the
project-level templates/ directory. The first line of a template is its
subject ("Subject: ...") and the rest is the body.

Two placeholder styles are substituted:
    [STUDENT_NAME]  upper-case bracket placeholders (teacher-facing copy)
    {student_name}  brace placeholders

Usage:
    from journey.templates.registry import get_template

    text = get_template(
        "parents/iteration_update",
        student_name="Ana",
        phase_name="Analyze",
    )
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)

# Default templates directory (relative to project root)
TEMPLATES_DIR = Path(__file__).parent.parent.parent.parent / "templates"

SUBJECT_PREFIX = "Subject:"


@dataclass
class MessageTemplate:
    key: str
    subject: str
    body: str


def _get_template_uncached(key: str) -> str:
    """Load raw template from file without caching.

    Raises:
        FileNotFoundError: If template file doesn't exist
    """
    file_path = TEMPLATES_DIR / f"{key}.md"
    if not file_path.exists():
        raise FileNotFoundError(f"Template not found: {key} (looked at {file_path})")

    return file_path.read_text(encoding="utf-8")


@lru_cache(maxsize=64)
def _get_cached_template(key: str) -> str:
    return _get_template_uncached(key)


def substitute(content: str, **variables: object) -> str:
    """Replace [NAME] and {name} placeholders; unknown ones are left as is."""
    for var_name, var_value in variables.items():
        content = content.replace(f"[{var_name.upper()}]", str(var_value))
        content = content.replace(f"{{{var_name}}}", str(var_value))
    return content


def get_template(key: str, use_cache: bool = True, **variables: object) -> str:
    """Load template from file and substitute variables.

    Args:
        key: Path-like key, e.g., "parents/iteration_update"
        use_cache: Whether to use cached version (default True)
        **variables: Variables to substitute, e.g., student_name="Ana"
            fills both [STUDENT_NAME] and {student_name}

    Raises:
        FileNotFoundError: If template file doesn't exist
    """
    content = _get_cached_template(key) if use_cache else _get_template_uncached(key)
    return substitute(content, **variables)


def get_message(key: str, **variables: object) -> MessageTemplate:
    """Template split into subject line and body."""
    content = get_template(key, **variables)
    first, _, rest = content.partition("\n")
    if first.startswith(SUBJECT_PREFIX):
        return MessageTemplate(
            key=key, subject=first[len(SUBJECT_PREFIX) :].strip(), body=rest.lstrip("\n")
        )
    return MessageTemplate(key=key, subject="", body=content)


def list_templates() -> list[str]:
    """List all available template keys, e.g. ["parents/iteration_update"]."""
    if not TEMPLATES_DIR.exists():
        logger.warning("templates_dir_not_found", path=str(TEMPLATES_DIR))
        return []

    keys = []
    for path in TEMPLATES_DIR.rglob("*.md"):
        keys.append(path.relative_to(TEMPLATES_DIR).with_suffix("").as_posix())
    return sorted(keys)


def clear_cache() -> None:
    """Clear the template cache."""
    _get_cached_template.cache_clear()
