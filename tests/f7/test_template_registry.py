"""Tests for the message template registry."""

import pytest

from journey.templates import registry
from journey.templates.registry import (
    clear_cache,
    get_message,
    get_template,
    list_templates,
    substitute,
)


@pytest.fixture(autouse=True)
def fresh_cache():
    clear_cache()
    yield
    clear_cache()


def test_list_templates():
    assert list_templates() == ["parents/iteration_update", "parents/struggling_student"]


def test_list_templates_missing_dir(monkeypatch, tmp_path):
    monkeypatch.setattr(registry, "TEMPLATES_DIR", tmp_path / "missing")

    assert list_templates() == []


def test_get_template_substitutes_known_placeholders():
    text = get_template("parents/iteration_update", student_name="Ana")

    assert "Ana's progress" in text
    assert "[PHASE_NAME]" in text


def test_substitute_both_styles():
    assert substitute("Hi {name}, [NAME]! {other}", name="Bo") == "Hi Bo, Bo! {other}"


def test_missing_template():
    with pytest.raises(FileNotFoundError, match="parents/report_card"):
        get_template("parents/report_card")


def test_get_message_splits_subject():
    message = get_message("parents/iteration_update", teacher_name="Mr. Cho")

    assert message.key == "parents/iteration_update"
    assert message.subject == "Project Update: Creative Process Journey"
    assert message.body.startswith("Dear Parent/Guardian,")
    assert "Mr. Cho" in message.body


def test_message_without_subject(monkeypatch, tmp_path):
    (tmp_path / "notes").mkdir()
    (tmp_path / "notes" / "plain.md").write_text("Hello {student_name}\n", encoding="utf-8")
    monkeypatch.setattr(registry, "TEMPLATES_DIR", tmp_path)

    message = get_message("notes/plain", student_name="Cleo")

    assert message.subject == ""
    assert message.body == "Hello Cleo\n"


def test_uncached_read_sees_changes(monkeypatch, tmp_path):
    path = tmp_path / "note.md"
    path.write_text("v1", encoding="utf-8")
    monkeypatch.setattr(registry, "TEMPLATES_DIR", tmp_path)

    assert get_template("note") == "v1"
    path.write_text("v2", encoding="utf-8")
    assert get_template("note") == "v1"
    assert get_template("note", use_cache=False) == "v2"
