"""Tests for the report builder and report rendering."""

import io
import json
from dataclasses import replace

import pytest
from docx import Document

from journey.core.reports import (
    ReportGenerationError,
    ReportTemplate,
    available_templates,
    render_report,
    report_filename,
    write_report,
)


class TestTemplates:
    def test_available_for_grade(self):
        ids = [t.id for t in available_templates("middle")]

        assert ids == [
            "individual-comprehensive",
            "classroom-summary",
            "parent-summary",
            "portfolio-showcase",
            "middle-portfolio",
        ]

    def test_custom_templates_filtered_by_grade(self):
        custom = [
            ReportTemplate.from_dict({"id": "any-grade", "sections": []}),
            ReportTemplate.from_dict({"id": "seniors", "grade_level": "high"}),
        ]

        ids = [t.id for t in available_templates("middle", custom)]

        assert "any-grade" in ids
        assert "seniors" not in ids

    def test_template_from_dict_defaults(self):
        template = ReportTemplate.from_dict(
            {"id": "mine", "sections": [{"id": "notes", "data_source": "peers"}]}
        )

        assert template.format == ["pdf"]
        assert template.customizable
        assert template.section("notes").name == "notes"
        assert template.section("missing") is None


class TestBuilder:
    def test_select_template(self, builder):
        assert builder.select_template("classroom-summary")

        assert builder.title == "Classroom Summary Report"
        assert builder.sections == ["class-progress", "student-rankings", "insights"]
        assert builder.format == "pdf"
        assert builder.step == "students"

    def test_unknown_template(self, builder):
        assert not builder.select_template("yearbook")
        assert builder.template is None
        assert builder.step == "template"

    def test_grade_template_not_offered_elsewhere(self, builder):
        assert not builder.select_template("high-professional")

    def test_toggles(self, builder):
        builder.select_template("individual-comprehensive")

        builder.toggle_section("peer-feedback")
        assert builder.sections[-1] == "peer-feedback"
        builder.toggle_section("progress-overview")
        assert "progress-overview" not in builder.sections

        builder.toggle_student("s2")
        builder.toggle_student("s1")
        builder.toggle_student("s2")
        assert builder.include_students == ["s1"]

        builder.select_all_students()
        assert builder.include_students == ["s1", "s2", "s3"]

    def test_format_and_steps(self, builder):
        with pytest.raises(ValueError):
            builder.set_format("xml")
        with pytest.raises(ValueError):
            builder.go_to("publish")

        assert builder.step_progress() == 20
        builder.go_to("review")
        assert builder.step_progress() == 100

    def test_report_data_needs_template(self, builder):
        assert builder.report_data() is None

    def test_report_data_for_one_student(self, builder, now):
        builder.select_template("individual-comprehensive")
        builder.toggle_student("s1")

        data = builder.report_data(now=now)

        assert [s.name for s in data.students] == ["Ana"]
        assert [a.id for a in data.assessments] == ["a1", "a2"]
        assert [r.id for r in data.peer_reviews] == ["r1", "r2"]
        assert [e.id for e in data.iterations] == ["i1", "i2"]
        assert [a.student_id for a in data.analytics.individual] == ["s1"]
        assert data.metadata["student_count"] == 1
        assert data.metadata["generated_at"] == now.isoformat()

    def test_final_and_preview_config(self, builder, now):
        builder.select_template("classroom-summary")

        final = builder.final_config(now=now)
        preview = builder.preview_config(now=now)

        assert final.include_students == ["s1", "s2", "s3"]
        assert final.format == "pdf"
        assert final.date_end == now.isoformat()
        assert final.date_start.startswith("2026-09-02")
        assert preview.include_students == ["s1"]
        assert preview.format == "html"

    def test_config_requires_template(self, builder):
        with pytest.raises(ReportGenerationError):
            builder.final_config()


class TestRendering:
    def _render(self, builder, template_id, fmt, now):
        builder.select_template(template_id)
        builder.set_format(fmt)
        return render_report(builder.report_data(now=now), builder.final_config(now=now), builder.template)

    def test_json(self, builder, now):
        document = json.loads(self._render(builder, "classroom-summary", "json", now))

        assert document["$schema"] == "report_v1"
        assert list(document["sections"]) == ["class-progress", "student-rankings", "insights"]
        metrics = {row["metric"]: row["value"] for row in document["sections"]["class-progress"]}
        assert metrics["average_progress"] == 33
        assert metrics["risk_students"] == 2
        assert metrics["insight:risk_alert"] == "Students at Risk"
        ana = document["sections"]["student-rankings"][0]
        assert ana["current_phase"] == "Prototype"
        assert ana["time_spent"] == 900
        assert document["analytics"]["classroom"]["total_students"] == 3

    def test_csv_sections(self, builder, now):
        text = self._render(builder, "classroom-summary", "csv", now)
        lines = text.splitlines()

        assert lines[0] == "section,class-progress"
        assert lines[1] == "metric,value,description,recommendations"
        assert lines[2] == "average_progress,33,,"
        assert "section,student-rankings" in lines
        assert "s1,Ana,70.0,Prototype,900" in lines

    def test_html_escapes_title(self, builder, now):
        builder.select_template("parent-summary")
        builder.set_format("html")
        builder.title = "Ana & Ben <draft>"

        text = render_report(
            builder.report_data(now=now), builder.final_config(now=now), builder.template
        )

        assert "<h1>Ana &amp; Ben &lt;draft&gt;</h1>" in text
        assert "Week 4 of 8 &middot; 3 students" in text
        assert '<section id="child-progress">' in text

    def test_html_empty_section(self, make_builder, now):
        builder = make_builder(with_analytics=False)

        text = self._render(builder, "parent-summary", "html", now)

        assert "No data for this section." in text

    def test_pdf_document(self, builder, now):
        content = self._render(builder, "classroom-summary", "pdf", now)

        assert isinstance(content, bytes)
        assert content.startswith(b"%PDF-")
        assert content.rstrip().endswith(b"%%EOF")

    def test_docx_document(self, builder, now):
        content = self._render(builder, "classroom-summary", "docx", now)

        document = Document(io.BytesIO(content))
        texts = [p.text for p in document.paragraphs]
        assert texts[0] == "Classroom Summary Report"
        assert "Week 4 of 8 - 3 students" in texts
        assert "Class Progress Overview" in texts
        assert "Student Performance" in texts
        progress_table = document.tables[0]
        assert [c.text for c in progress_table.rows[0].cells] == [
            "metric", "value", "description", "recommendations",
        ]
        assert [c.text for c in progress_table.rows[1].cells][:2] == ["average_progress", "33"]
        rankings = document.tables[1]
        assert [c.text for c in rankings.rows[1].cells][:2] == ["s1", "Ana"]

    def test_docx_empty_section(self, make_builder, now):
        builder = make_builder(with_analytics=False)

        content = self._render(builder, "parent-summary", "docx", now)

        texts = [p.text for p in Document(io.BytesIO(content)).paragraphs]
        assert "No data for this section." in texts

    def test_unknown_format(self, builder, now):
        builder.select_template("classroom-summary")
        config = replace(builder.final_config(now=now), format="xlsx")

        with pytest.raises(ReportGenerationError, match="xlsx"):
            render_report(builder.report_data(now=now), config, builder.template)


class TestWriteReport:
    def test_writes_file(self, builder, tmp_path, now):
        builder.select_template("classroom-summary")
        builder.set_format("json")

        result = write_report(
            builder.report_data(now=now), builder.final_config(now=now), builder.template,
            tmp_path, now=now,
        )

        assert result.success
        assert result.report_path == tmp_path / "reports" / "classroom_summary_report_2026-10-02.json"
        assert result.report_path.exists()
        assert result.warnings == []

    def test_warnings(self, builder, tmp_path, now):
        builder.select_template("classroom-summary")
        builder.set_format("csv")
        builder.toggle_section("bogus")
        builder.toggle_student("nobody")

        result = write_report(
            builder.report_data(now=now), builder.final_config(now=now), builder.template,
            tmp_path, now=now,
        )

        assert result.success
        assert result.warnings == ["Report has no students", "Unknown sections ignored: bogus"]

    def test_default_pdf_written(self, builder, tmp_path, now):
        builder.select_template("classroom-summary")

        result = write_report(
            builder.report_data(now=now), builder.final_config(now=now), builder.template,
            tmp_path, now=now,
        )

        assert result.success
        assert result.report_path == tmp_path / "reports" / "classroom_summary_report_2026-10-02.pdf"
        assert result.report_path.read_bytes().startswith(b"%PDF-")

    def test_docx_written(self, builder, tmp_path, now):
        builder.select_template("individual-comprehensive")
        builder.set_format("docx")

        result = write_report(
            builder.report_data(now=now), builder.final_config(now=now), builder.template,
            tmp_path, now=now,
        )

        assert result.success
        assert result.report_path.suffix == ".docx"
        document = Document(io.BytesIO(result.report_path.read_bytes()))
        assert document.paragraphs[0].text == "Individual Student Report"

    def test_filename(self, builder, now):
        builder.select_template("parent-summary")
        builder.title = "Ana's Report!"
        builder.set_format("html")

        assert report_filename(builder.final_config(now=now), now) == "ana_s_report_2026-10-02.html"
