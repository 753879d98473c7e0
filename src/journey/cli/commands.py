"""CLI commands for the creative journey toolkit.

Commands:
- phases: Show the four creative phases
- rubric-check / rubric-export: Validate and export rubrics
- score: Score (and optionally submit) an assessment
- peer-stats: Peer review progress for a student
- iterations / iteration-export: Iteration history, stats and export
- analytics / progress: Class analytics and per-student progress
- adapt: Run adaptation ticks for a student
- tutor: Skill gaps, recommendations and a tutor reply
- guidance / parent-email: Teacher guidance and parent emails
- resources: Support resources and recommendations for a phase
- phase-templates / phase-suggest: Project templates and phase starter content
- journey-template: Bulk add a template or suggestions to a saved journey
- report: Render a report to data/reports/
- serve: Run the web API

Class-wide commands read a classroom snapshot JSON file
(see journey.core.classroom). Data is written under JOURNEY_DATA_DIR
(default: data).
"""

from __future__ import annotations

import asyncio
import json
import os
import random
from datetime import timedelta
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from journey.core.adaptive import (
    AdaptationEngine,
    LearningProfile,
    analyze_performance,
    generate_adaptive_path,
    run_adaptation_loop,
)
from journey.core.analytics import export_payload, format_percentage
from journey.core.assessment import (
    Assessment,
    calculate_assessment,
    generate_insights,
    submit_assessment,
)
from journey.core.classroom import (
    ClassroomDataError,
    ClassroomSnapshot,
    load_classroom,
    load_json,
)
from journey.core.iteration_analytics import iteration_insights, iteration_kpis, iteration_metrics
from journey.core.iterations import (
    export_history,
    filter_iterations,
    format_duration,
    format_event_date,
    iteration_stats,
)
from journey.core.journey_editor import (
    JourneyEditor,
    JourneyNotFoundError,
    load_journey,
    save_journey,
)
from journey.core.peer_review import review_stats, summarize_student
from journey.core.phases import (
    PHASE_NAMES,
    PHASE_ORDER,
    GradeLevel,
    PhaseType,
    default_phases,
    filter_templates,
    get_phase_template,
    phase_suggestions,
    template_categories,
)
from journey.core.reports import (
    ReportBuilder,
    ReportGenerationError,
    write_report,
)
from journey.core.resources import (
    RESOURCE_CATEGORIES,
    category_counts,
    filter_resources,
    recommended_resources,
)
from journey.core.rubric import (
    RubricNotFoundError,
    export_csv,
    export_document,
    export_filename,
    level_label,
    load_rubric,
    rubric_calculations,
    validate_rubric,
)
from journey.core.student_progress import progress_metrics
from journey.core.teacher_guidance import (
    PARENT_TEMPLATES,
    class_patterns,
    class_stats,
    guidance_actions,
    parent_message,
    tips_for_phase,
)
from journey.core.tutor import analyze_skills, generate_recommendations, generate_response
from journey.utils.time_utils import utc_now
from journey.utils.validators import (
    AmbiguousStudentIdError,
    StudentNotFoundError,
    resolve_student_id,
)

app = typer.Typer(
    name="journey",
    help="Creative process journey toolkit: rubrics, assessments, peer review and analytics.",
    no_args_is_help=True,
)

console = Console()


def _data_dir() -> Path:
    return Path(os.environ.get("JOURNEY_DATA_DIR", "data"))


def _load_classroom_or_exit(path: str) -> ClassroomSnapshot:
    try:
        return load_classroom(Path(path).expanduser())
    except ClassroomDataError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)


def _resolve_student_or_exit(snapshot: ClassroomSnapshot, prefix: str) -> str:
    """Resolve a student_id prefix against the roster, or exit with a helpful error."""
    candidates = [s.id for s in snapshot.students]
    try:
        return resolve_student_id(prefix, candidates)
    except StudentNotFoundError as e:
        console.print(f"[red]✗ {e}[/red]")
        if candidates:
            console.print("\nStudents:")
            for c in candidates:
                console.print(f"  - {c}")
        raise typer.Exit(code=1)
    except AmbiguousStudentIdError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)


def _truncate(text: str, max_len: int = 60) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


# =============================================================================
# PHASES AND RUBRICS
# =============================================================================


@app.command()
def phases() -> None:
    """Show the four creative phases and their default content."""
    table = Table(show_header=True, header_style="bold")
    table.add_column("#", justify="right", width=3)
    table.add_column("Phase", style="cyan")
    table.add_column("Description")
    table.add_column("Obj/Act/Del", justify="center")

    for idx, phase in enumerate(default_phases(), start=1):
        counts = f"{len(phase.objectives)}/{len(phase.activities)}/{len(phase.deliverables)}"
        table.add_row(str(idx), phase.name, phase.description, counts)

    console.print(table)


@app.command(name="rubric-check")
def rubric_check(
    rubric_file: str = typer.Argument(..., help="Path to rubric JSON"),
) -> None:
    """Validate a rubric and show its weights and points."""
    try:
        rubric = load_rubric(Path(rubric_file).expanduser())
    except RubricNotFoundError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    calc = rubric_calculations(rubric)
    table = Table(show_header=True, header_style="bold", title=rubric.name)
    table.add_column("Criterion", style="cyan")
    table.add_column("Weight", justify="right")
    table.add_column("Max", justify="right")
    table.add_column("Essential", justify="center")
    for criterion in rubric.criteria:
        table.add_row(
            criterion.name,
            f"{criterion.weight:g}%",
            str(criterion.max_points),
            "✓" if criterion.essential else "",
        )
    console.print(table)
    console.print(
        f"  [dim]total weight:[/dim] {calc.total_weight:g}%  "
        f"[dim]max points:[/dim] {calc.max_points}  "
        f"[dim]weighted max:[/dim] {calc.weighted_max_points:.1f}"
    )

    errors = validate_rubric(rubric)
    if errors:
        for error in errors:
            console.print(f"[red]✗ {error}[/red]")
        raise typer.Exit(code=1)
    console.print("[green]✓ Rubric is valid[/green]")


@app.command(name="rubric-export")
def rubric_export(
    rubric_file: str = typer.Argument(..., help="Path to rubric JSON"),
    fmt: str = typer.Option("json", "--format", "-f", help="Format: json, csv"),
    output: str | None = typer.Option(None, "--output", "-o", help="Output directory"),
) -> None:
    """Export a rubric with its calculations."""
    try:
        rubric = load_rubric(Path(rubric_file).expanduser())
    except RubricNotFoundError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    output_dir = Path(output) if output else _data_dir() / "exports"
    output_dir.mkdir(parents=True, exist_ok=True)

    if fmt == "json":
        path = output_dir / export_filename(rubric)
        path.write_text(
            json.dumps(export_document(rubric), indent=2, ensure_ascii=False), encoding="utf-8"
        )
    elif fmt == "csv":
        path = output_dir / export_filename(rubric).replace(".json", ".csv")
        path.write_text(export_csv(rubric), encoding="utf-8")
    else:
        console.print(f"[red]✗ Unsupported format: {fmt}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]✓ Rubric exported[/green]\n  [dim]path:[/dim] {path}")


@app.command()
def score(
    rubric_file: str = typer.Argument(..., help="Path to rubric JSON"),
    assessment_file: str = typer.Argument(..., help="Path to assessment JSON"),
    submit: bool = typer.Option(False, "--submit", help="Submit and save the assessment"),
    mode: str = typer.Option("teacher", "--mode", "-m", help="Assessor: teacher, peer, self"),
) -> None:
    """Score an assessment against its rubric."""
    try:
        rubric = load_rubric(Path(rubric_file).expanduser())
        assessment = Assessment.from_dict(load_json(Path(assessment_file).expanduser()))
    except (RubricNotFoundError, ClassroomDataError) as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    calc = calculate_assessment(assessment, rubric)
    assessment = generate_insights(assessment, rubric)

    table = Table(show_header=True, header_style="bold")
    table.add_column("Criterion", style="cyan")
    table.add_column("Level")
    table.add_column("Points", justify="right")
    for criterion in rubric.criteria:
        entry = assessment.score_for(criterion.id)
        if entry is None:
            table.add_row(criterion.name, "[dim]not scored[/dim]", "-")
        else:
            label = level_label(rubric.grade_level, entry.level)
            table.add_row(criterion.name, label, f"{entry.points}/{criterion.max_points}")
    console.print(table)

    color = "green" if calc.is_passing else "red"
    status = "PASSING" if calc.is_passing else "NOT PASSING"
    console.print(
        Panel(
            f"[bold]{calc.percentage}%[/bold] - [{color}]{status}[/{color}]\n"
            f"Points: {calc.total_points}/{calc.max_points} | "
            f"Scored: {calc.completed_criteria}/{len(rubric.criteria)}",
            title=f"[bold]{assessment.student_name or assessment.student_id}[/bold]",
            expand=False,
        )
    )
    for item in assessment.strengths:
        console.print(f"  [green]+[/green] {item}")
    for item in assessment.improvements:
        console.print(f"  [yellow]-[/yellow] {item}")

    if submit:
        result = submit_assessment(assessment, rubric, _data_dir(), mode=mode)
        for warning in result.warnings:
            console.print(f"[yellow]⚠ {warning}[/yellow]")
        if not result.success:
            console.print(f"[red]✗ {result.message}[/red]")
            raise typer.Exit(code=1)
        console.print(f"[green]✓ {result.message}[/green]")
        console.print(f"  [dim]path:[/dim] {result.assessment_path}")


# =============================================================================
# PEER REVIEW AND ITERATIONS
# =============================================================================


@app.command(name="peer-stats")
def peer_stats(
    classroom_file: str = typer.Argument(..., help="Path to classroom snapshot JSON"),
    student: str = typer.Option(..., "--student", "-s", help="Student ID (or prefix)"),
) -> None:
    """Peer review progress and received feedback for a student."""
    snapshot = _load_classroom_or_exit(classroom_file)
    student_id = _resolve_student_or_exit(snapshot, student)

    stats = review_stats(snapshot.peer_reviews, snapshot.students, student_id)
    summary = summarize_student(snapshot.peer_reviews, snapshot.students, student_id)

    console.print(
        Panel(
            f"Given: {stats.reviews_given} | Received: {stats.reviews_received} | "
            f"Average rating: {stats.average_rating}\n"
            f"Completion: {stats.completion_rate}%"
            + (" | [magenta]Top collaborator[/magenta]" if summary.top_collaborator else ""),
            title=f"[bold]{summary.student_name or student_id}[/bold]",
            expand=False,
        )
    )
    if stats.pending_students:
        console.print("Still to review: " + ", ".join(s.name for s in stats.pending_students))
    for item in stats.strengths:
        console.print(f"  [green]+[/green] {_truncate(item, 80)}")
    for item in stats.improvements:
        console.print(f"  [yellow]-[/yellow] {_truncate(item, 80)}")


@app.command()
def iterations(
    classroom_file: str = typer.Argument(..., help="Path to classroom snapshot JSON"),
    iteration_type: str = typer.Option("all", "--type", "-t", help="quick_loop, major_pivot, ..."),
    phase: str = typer.Option("all", "--phase", "-p", help="Target phase (e.g. ANALYZE)"),
    query: str = typer.Option("", "--query", "-q", help="Search reason and notes"),
    time_range: str = typer.Option("all", "--range", help="all, week, month"),
    sort_by: str = typer.Option("date", "--sort", help="date, duration, type"),
) -> None:
    """List iterations with stats, metrics and insights."""
    snapshot = _load_classroom_or_exit(classroom_file)
    try:
        events = filter_iterations(
            snapshot.iterations,
            iteration_type=iteration_type,
            phase=phase.upper() if phase != "all" else phase,
            query=query,
            time_range=time_range,
            sort_by=sort_by,
        )
    except ValueError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    table = Table(show_header=True, header_style="bold")
    table.add_column("Date", width=12)
    table.add_column("From → To", style="cyan")
    table.add_column("Type")
    table.add_column("Duration", justify="right")
    table.add_column("Reason", width=50)
    for event in events:
        table.add_row(
            format_event_date(event.timestamp),
            f"{PHASE_NAMES[event.from_phase]} → {PHASE_NAMES[event.to_phase]}",
            event.iteration_type or "-",
            format_duration(event.duration),
            _truncate(event.reason, 50),
        )
    console.print(table)

    stats = iteration_stats(snapshot.iterations, snapshot.project_duration)
    console.print(
        f"  [dim]total:[/dim] {stats.total_iterations}  "
        f"[dim]time impact:[/dim] {stats.time_impact:.1f}%  "
        f"[dim]most common:[/dim] {stats.most_common_type or '-'}"
    )
    for pattern in stats.patterns:
        console.print(f"  [yellow]•[/yellow] {pattern.description}")

    start = snapshot.start_date or (utc_now() - timedelta(weeks=snapshot.current_week)).isoformat()
    metrics = iteration_metrics(
        snapshot.iterations, snapshot.phases, snapshot.project_duration, start
    )
    for kpi in iteration_kpis(metrics):
        console.print(f"  [bold]{kpi.label}:[/bold] {kpi.value}")
    for insight in iteration_insights(
        metrics, snapshot.iterations, snapshot.phases, snapshot.current_phase
    ):
        console.print(f"  [bold]{insight.title}[/bold] - {insight.description}")


@app.command(name="iteration-export")
def iteration_export(
    classroom_file: str = typer.Argument(..., help="Path to classroom snapshot JSON"),
    fmt: str = typer.Option("json", "--format", "-f", help="Format: json, csv"),
    output: str | None = typer.Option(None, "--output", "-o", help="Output directory"),
) -> None:
    """Export the iteration history."""
    snapshot = _load_classroom_or_exit(classroom_file)
    output_dir = Path(output) if output else _data_dir() / "exports"
    result = export_history(snapshot.iterations, output_dir, fmt)

    if not result.success:
        console.print(f"[red]✗ {result.message}[/red]")
        raise typer.Exit(code=1)
    for warning in result.warnings:
        console.print(f"[yellow]⚠ {warning}[/yellow]")
    console.print(f"[green]✓ {result.message}[/green]\n  [dim]path:[/dim] {result.export_path}")


# =============================================================================
# ANALYTICS AND PROGRESS
# =============================================================================


@app.command()
def analytics(
    classroom_file: str = typer.Argument(..., help="Path to classroom snapshot JSON"),
    export: bool = typer.Option(False, "--export", help="Write analytics JSON to data/exports/"),
) -> None:
    """Class analytics and predictive insights."""
    snapshot = _load_classroom_or_exit(classroom_file)
    report = snapshot.analytics()
    classroom = report.classroom

    table = Table(show_header=True, header_style="bold")
    table.add_column("Student", style="cyan")
    table.add_column("Progress", justify="right")
    table.add_column("Engagement", justify="right")
    table.add_column("Collab.", justify="right")
    table.add_column("Creativity", justify="right")
    table.add_column("Persistence", justify="right")
    for item in report.individual:
        flag = " [red]![/red]" if item.student_id in classroom.risk_students else ""
        table.add_row(
            item.student_name + flag,
            format_percentage(item.overall_progress),
            str(item.engagement_score),
            str(item.collaboration_score),
            str(item.creativity_index),
            str(item.persistence_metric),
        )
    console.print(table)
    console.print(
        f"  [dim]average progress:[/dim] {format_percentage(classroom.average_progress)}  "
        f"[dim]at risk:[/dim] {len(classroom.risk_students)}  "
        f"[dim]top performers:[/dim] {len(classroom.top_performers)}"
    )

    for insight in report.insights:
        color = {"high": "red", "medium": "yellow"}.get(insight.priority, "blue")
        console.print(
            f"[{color}]● {insight.title}[/{color}] ({insight.confidence}% confidence) - "
            f"{insight.description}"
        )

    if export:
        payload = export_payload(
            report, snapshot.current_week, snapshot.grade_level, snapshot.project_duration
        )
        exports_dir = _data_dir() / "exports"
        exports_dir.mkdir(parents=True, exist_ok=True)
        path = exports_dir / f"analytics-{payload['timestamp'][:10]}.json"
        path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        console.print(f"[green]✓ Analytics exported[/green]\n  [dim]path:[/dim] {path}")


@app.command()
def progress(
    classroom_file: str = typer.Argument(..., help="Path to classroom snapshot JSON"),
    student: str = typer.Option(..., "--student", "-s", help="Student ID (or prefix)"),
) -> None:
    """Phase completion, pace, achievements and milestones for a student."""
    snapshot = _load_classroom_or_exit(classroom_file)
    student_id = _resolve_student_or_exit(snapshot, student)
    student_progress = snapshot.progress_for(student_id)

    metrics = progress_metrics(
        student_progress,
        snapshot.phases,
        [a for a in snapshot.assessments if a.student_id == student_id],
        student_progress.iteration_events,
        snapshot.project_duration,
        snapshot.current_week,
    )

    table = Table(show_header=True, header_style="bold")
    table.add_column("Phase", style="cyan")
    table.add_column("Completion", justify="right")
    table.add_column("Iterations", justify="right")
    table.add_column("Milestone")
    for completion, milestone in zip(metrics.phase_completion, metrics.milestones):
        name = f"{completion.name} *" if completion.is_active else completion.name
        table.add_row(name, f"{completion.completion}%", str(completion.iterations), milestone.status)
    console.print(table)

    pace_color = "red" if metrics.pace_status == "behind" else "green"
    console.print(
        f"  [dim]overall:[/dim] {metrics.overall_progress}%  "
        f"[dim]pace:[/dim] [{pace_color}]{metrics.pace_status}[/{pace_color}]  "
        f"[dim]average score:[/dim] {metrics.average_score}%"
    )
    earned = metrics.earned_achievements
    if earned:
        console.print("  [dim]achievements:[/dim] " + ", ".join(a.name for a in earned))


# =============================================================================
# ADAPTIVE AND TUTOR
# =============================================================================


@app.command()
def adapt(
    classroom_file: str = typer.Argument(..., help="Path to classroom snapshot JSON"),
    student: str = typer.Option(..., "--student", "-s", help="Student ID (or prefix)"),
    ticks: int = typer.Option(3, "--ticks", "-n", help="Adaptation steps to run"),
    interval: float = typer.Option(0.0, "--interval", help="Seconds between steps"),
    seed: int | None = typer.Option(None, "--seed", help="Random seed for the simulation"),
    style: str = typer.Option("mixed", "--style", help="Learning style"),
) -> None:
    """Build an adaptive path and run adaptation steps for a student."""
    snapshot = _load_classroom_or_exit(classroom_file)
    student_id = _resolve_student_or_exit(snapshot, student)
    report = snapshot.analytics()
    learning = report.student(student_id)
    student_progress = snapshot.progress_for(student_id)

    analysis = analyze_performance(
        [a for a in snapshot.assessments if a.student_id == student_id],
        learning,
        student_progress.iteration_events,
        student_progress,
    )
    profile = LearningProfile(student_id=student_id, learning_style=style)
    engine = AdaptationEngine(profile, learning, analysis, rng=random.Random(seed))

    path = generate_adaptive_path(
        snapshot.phases,
        snapshot.current_phase,
        learning.student_name,
        profile,
        analysis,
        engine.metrics.difficulty,
    )
    console.print(f"[bold]{path.name}[/bold] ({path.estimated_time} min)")
    for item in path.content:
        console.print(f"  • {item.title} [dim]({item.modality}, difficulty {item.difficulty})[/dim]")
    if not path.content:
        console.print("  [dim]No content matches the current profile[/dim]")

    asyncio.run(run_adaptation_loop(engine, interval=interval, max_ticks=ticks))

    metrics = engine.metrics
    status = engine.status()
    console.print(
        Panel(
            f"Engagement: {round(metrics.engagement)}% | Flow: {round(engine.profile.flow_state.level)}% | "
            f"Difficulty: {metrics.difficulty:.1f}/10 | Pace: {metrics.pace:.1f}x\n"
            f"{status.recommendation}",
            title=f"[bold]{status.label}[/bold]",
            expand=False,
        )
    )


@app.command()
def tutor(
    classroom_file: str = typer.Argument(..., help="Path to classroom snapshot JSON"),
    student: str = typer.Option(..., "--student", "-s", help="Student ID (or prefix)"),
    message: str | None = typer.Option(None, "--message", "-m", help="Message to the tutor"),
    seed: int | None = typer.Option(None, "--seed", help="Random seed for replies"),
) -> None:
    """Skill gaps, recommendations and an optional tutor reply."""
    snapshot = _load_classroom_or_exit(classroom_file)
    student_id = _resolve_student_or_exit(snapshot, student)
    learning = snapshot.analytics().student(student_id)

    analysis = analyze_skills(
        [a for a in snapshot.assessments if a.student_id == student_id],
        [r for r in snapshot.peer_reviews if r.reviewee_id == student_id],
        learning,
        snapshot.grade_level,
    )

    table = Table(show_header=True, header_style="bold")
    table.add_column("Skill", style="cyan")
    table.add_column("Level", justify="right")
    table.add_column("Gap", justify="right")
    gaps = {g.skill: g for g in analysis.gaps}
    for skill, level in analysis.skill_levels.items():
        gap = gaps.get(skill)
        table.add_row(skill.replace("_", " "), f"{level:.0f}", f"{gap.gap:.0f}" if gap else "-")
    console.print(table)

    recommendations = generate_recommendations(
        analysis,
        learning,
        snapshot.progress_for(student_id),
        snapshot.phases,
        snapshot.current_phase,
    )
    for rec in recommendations:
        console.print(f"  ({rec.priority}) [bold]{rec.title}[/bold] - {rec.description}")

    if message:
        reply = generate_response(
            message,
            snapshot.grade_level,
            {
                "student_name": learning.student_name,
                "current_phase": snapshot.phases[snapshot.current_phase].name,
                "strong_skill": analysis.strong_areas[0] if analysis.strong_areas else None,
                "improvement_area": (
                    analysis.improvement_areas[0] if analysis.improvement_areas else None
                ),
            },
            rng=random.Random(seed),
        )
        console.print(Panel(reply, title="[bold]Tutor[/bold]", expand=False))


# =============================================================================
# TEACHER GUIDANCE
# =============================================================================


@app.command()
def guidance(
    classroom_file: str = typer.Argument(..., help="Path to classroom snapshot JSON"),
) -> None:
    """Class patterns, prioritized actions and facilitation tips."""
    snapshot = _load_classroom_or_exit(classroom_file)
    by_student = snapshot.iterations_by_student()
    class_size = len(snapshot.students)
    total_weeks = snapshot.project_duration

    stats = class_stats(by_student, class_size)
    console.print(
        f"Week {snapshot.current_week} of {total_weeks} | "
        f"On track: {stats.students_on_track} | "
        f"Avg iterations: {stats.average_iterations_per_student:.1f}"
    )

    for action in guidance_actions(by_student, class_size, snapshot.current_week, total_weeks):
        console.print(
            f"  [bold]{action.priority.upper()}[/bold] {action.title} - {action.description} "
            f"[dim]({action.suggested_timing})[/dim]"
        )
    for pattern in class_patterns(by_student, class_size, snapshot.current_week, total_weeks):
        color = "green" if pattern.type == "positive" else "yellow"
        console.print(f"  [{color}]●[/{color}] {pattern.pattern}: {pattern.recommendation}")

    phase_type = snapshot.phases[snapshot.current_phase].type
    console.print(f"\n[bold]Facilitation tips ({PHASE_NAMES[phase_type]})[/bold]")
    for tip in tips_for_phase(phase_type):
        console.print(f"  • {tip.situation}: {tip.strategy}")


@app.command(name="parent-email")
def parent_email(
    template: str = typer.Argument(..., help=f"Template: {', '.join(PARENT_TEMPLATES)}"),
    student_name: str = typer.Option(..., "--student-name", help="Student name"),
    phase: str = typer.Option("ANALYZE", "--phase", "-p", help="Phase (e.g. PROTOTYPE)"),
    teacher_name: str = typer.Option("", "--teacher", help="Teacher name for the signature"),
    areas: list[str] = typer.Option([], "--area", help="Support area (repeatable)"),
) -> None:
    """Draft a parent email from a template."""
    if phase.upper() not in {p.value for p in PHASE_ORDER}:
        console.print(f"[red]✗ Unknown phase: {phase}[/red]")
        raise typer.Exit(code=1)
    try:
        message = parent_message(
            template,
            student_name=student_name,
            phase=PhaseType(phase.upper()),
            teacher_name=teacher_name,
            support_areas=areas,
        )
    except (KeyError, FileNotFoundError) as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[bold]Subject:[/bold] {message.subject}\n")
    console.print(message.body, markup=False)


# =============================================================================
# RESOURCES AND PHASE TEMPLATES
# =============================================================================


def _phase_or_exit(phase: str) -> PhaseType:
    try:
        return PhaseType(phase.upper())
    except ValueError:
        console.print(f"[red]✗ Unknown phase: {phase}[/red]")
        raise typer.Exit(code=1)


def _grade_or_exit(grade: str) -> GradeLevel:
    try:
        return GradeLevel(grade.lower())
    except ValueError:
        console.print(f"[red]✗ Unknown grade level: {grade}[/red]")
        raise typer.Exit(code=1)


@app.command()
def resources(
    phase: str = typer.Option("ANALYZE", "--phase", "-p", help="Current phase"),
    grade: str = typer.Option("middle", "--grade", "-g", help="elementary, middle or high"),
    category: str = typer.Option("all", "--category", "-c", help="guide, video, template, worksheet"),
    query: str = typer.Option("", "--search", "-s", help="Search titles, descriptions and tags"),
    featured: bool = typer.Option(False, "--featured", help="Featured resources only"),
    recent: str | None = typer.Option(None, "--recent", help="Most recent iteration type"),
) -> None:
    """Support resources for a phase, with recommendations."""
    phase_type = _phase_or_exit(phase)
    grade_level = _grade_or_exit(grade)
    try:
        found = filter_resources(phase_type, grade_level, category, query, featured, recent)
        picks = recommended_resources(phase_type, grade_level, recent)
    except ValueError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    if picks:
        console.print("[bold]Recommended[/bold]")
        for resource in picks:
            console.print(f"  ★ {resource.title} [dim]({resource.type})[/dim]")

    counts = category_counts(found)
    console.print("  ".join(f"[dim]{c.name}:[/dim] {counts[c.id]}" for c in RESOURCE_CATEGORIES))

    if not found:
        console.print("[yellow]No resources match[/yellow]")
        return
    table = Table(show_header=True, header_style="bold")
    table.add_column("Resource", style="cyan")
    table.add_column("Type")
    table.add_column("Level")
    table.add_column("Popularity", justify="right")
    for resource in found:
        title = f"{resource.title} ★" if resource.featured else resource.title
        table.add_row(title, resource.type, resource.difficulty, str(resource.popularity))
    console.print(table)


@app.command(name="phase-templates")
def phase_templates(
    grade: str = typer.Option("middle", "--grade", "-g", help="elementary, middle or high"),
    category: str = typer.Option("all", "--category", "-c", help="Template category"),
    query: str = typer.Option("", "--search", "-s", help="Search names, descriptions and subjects"),
) -> None:
    """Project templates that fill all four phases."""
    templates = filter_templates(_grade_or_exit(grade), category, query)
    if not templates:
        console.print("[yellow]No templates match[/yellow]")
        console.print(f"\nCategories: {', '.join(template_categories())}")
        return
    for template in templates:
        console.print(f"[bold cyan]{template.id}[/bold cyan] {template.name} [dim]({template.category})[/dim]")
        console.print(f"  {template.description}")
        console.print(f"  [dim]subjects:[/dim] {', '.join(template.subjects)}")


@app.command(name="phase-suggest")
def phase_suggest(
    phase: str = typer.Argument(..., help="Phase (e.g. BRAINSTORM)"),
    subject: str = typer.Option(..., "--subject", help="Subject being taught"),
    grade: str = typer.Option("middle", "--grade", "-g", help="elementary, middle or high"),
) -> None:
    """Starter objectives, activities and deliverables for one phase."""
    content = phase_suggestions(_phase_or_exit(phase), _grade_or_exit(grade), subject)
    console.print("[bold]Objectives[/bold]")
    for idx, text in enumerate(content.objectives):
        console.print(f"  objective-{idx}  {text}")
    console.print("[bold]Activities[/bold]")
    for idx, activity in enumerate(content.activities):
        console.print(f"  activity-{idx}  {activity['name']} [dim]({activity['duration']})[/dim]")
    console.print("[bold]Deliverables[/bold]")
    for idx, deliverable in enumerate(content.deliverables):
        console.print(f"  deliverable-{idx}  {deliverable['name']} [dim]({deliverable['format']})[/dim]")


@app.command(name="journey-template")
def journey_template(
    journey_id: str = typer.Argument(..., help="Saved journey id"),
    template_id: str | None = typer.Option(None, "--template", "-t", help="Template to apply to every phase"),
    phase: str | None = typer.Option(None, "--phase", "-p", help="Add suggestions to this phase instead"),
    subject: str = typer.Option("General", "--subject", help="Subject for suggestions"),
    items: list[str] = typer.Option([], "--item", help="Suggestion key to add, e.g. objective-0 (repeatable)"),
) -> None:
    """Bulk add a template or phase suggestions to a saved journey."""
    data_dir = _data_dir()
    try:
        journey = load_journey(journey_id, data_dir)
    except JourneyNotFoundError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    editor = JourneyEditor(journey)
    if phase:
        phase_type = _phase_or_exit(phase)
        content = phase_suggestions(phase_type, journey.grade_level, subject)
        editor.bulk_add(PHASE_ORDER.index(phase_type), *content.build(set(items) or None))
    elif template_id:
        template = get_phase_template(template_id)
        if template is None:
            console.print(f"[red]✗ Unknown template: {template_id}[/red]")
            console.print("\nTemplates:")
            for t in filter_templates(journey.grade_level):
                console.print(f"  - {t.id}")
            raise typer.Exit(code=1)
        editor.apply_template(template)
    else:
        console.print("[red]✗ Pass --template or --phase[/red]")
        raise typer.Exit(code=1)

    if not editor.has_changes:
        console.print("[yellow]Nothing was added[/yellow]")
        return

    saved = []
    if editor.flush(lambda j: saved.append(save_journey(j, data_dir))) == "error":
        console.print(f"[red]✗ {editor.error}[/red]")
        raise typer.Exit(code=1)
    for current in editor.current.phases:
        console.print(
            f"  {current.name}: {len(current.objectives)} objectives, "
            f"{len(current.activities)} activities, {len(current.deliverables)} deliverables"
        )
    console.print(f"[green]✓ Journey updated[/green]\n  [dim]path:[/dim] {saved[0].journey_path}")


# =============================================================================
# REPORTS
# =============================================================================


@app.command()
def report(
    classroom_file: str = typer.Argument(..., help="Path to classroom snapshot JSON"),
    template: str = typer.Option("classroom-summary", "--template", "-t", help="Template ID"),
    fmt: str = typer.Option("json", "--format", "-f", help="json, csv, html, pdf or docx"),
    students: list[str] = typer.Option([], "--student", "-s", help="Student ID (repeatable)"),
    sections: list[str] = typer.Option([], "--section", help="Toggle an optional section"),
    title: str | None = typer.Option(None, "--title", help="Report title"),
) -> None:
    """Render a report and save it to data/reports/."""
    snapshot = _load_classroom_or_exit(classroom_file)
    builder = ReportBuilder(
        snapshot.students,
        snapshot.progress,
        snapshot.assessments,
        snapshot.peer_reviews,
        snapshot.iterations,
        snapshot.analytics(),
        snapshot.grade_level,
        snapshot.project_duration,
        snapshot.current_week,
    )
    if not builder.select_template(template):
        console.print(f"[red]✗ Unknown template: {template}[/red]")
        console.print("\nTemplates:")
        for t in builder.templates:
            console.print(f"  - {t.id} [dim]({', '.join(t.format)})[/dim]")
        raise typer.Exit(code=1)

    for prefix in students:
        builder.toggle_student(_resolve_student_or_exit(snapshot, prefix))
    for section_id in sections:
        builder.toggle_section(section_id)
    if title:
        builder.title = title
    try:
        builder.set_format(fmt)
        config = builder.final_config()
    except (ValueError, ReportGenerationError) as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    result = write_report(builder.report_data(), config, builder.template, _data_dir())
    for warning in result.warnings:
        console.print(f"[yellow]⚠ {warning}[/yellow]")
    if not result.success:
        console.print(f"[red]✗ {result.message}[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]✓ {result.message}[/green]")


# =============================================================================
# WEB
# =============================================================================


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", help="Port"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the web API."""
    import uvicorn

    console.print(f"[bold]Serving on[/bold] http://{host}:{port}")
    uvicorn.run("journey.web.api:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
