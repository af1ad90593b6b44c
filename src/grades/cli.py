# ABOUTME: Provides the CLI for weighted grade averages, cohort statistics, and exports.
# ABOUTME: Loads a YAML config, builds the record source, and renders results with Rich.

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from src.common.errors import ConfigError, GradeSourceError
from src.common.logging_setup import configure_logging

from .config import DEFAULT_CONFIG_PATH, GradesConfig, build_collection, build_service, load_config
from .export import export_grade_reports
from .mongo import ensure_grade_indexes

console = Console()
app = typer.Typer(help="Weighted grade averages and cohort pass-rate statistics.")

ConfigOption = typer.Option(DEFAULT_CONFIG_PATH, "--config", help="Path to grades config YAML.")


def _load(config_path: Path) -> GradesConfig:
    try:
        config = load_config(config_path)
    except (FileNotFoundError, ConfigError) as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)
    configure_logging(config.logging.level)
    return config


def _format_avg(avg: Optional[float]) -> str:
    return "n/a" if avg is None else f"{avg:.2f}"


@app.command("learner-avg")
def learner_avg(
    learner_id: int = typer.Option(..., "--learner-id", help="Learner identifier."),
    config: Path = ConfigOption,
) -> None:
    """
    Weighted average of one learner's grades, per class.
    """
    cfg = _load(config)
    try:
        averages = build_service(cfg).weighted_average_per_class(learner_id)
    except GradeSourceError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)

    if not averages:
        console.print(f"[yellow]No grade records for learner {learner_id}[/yellow]")
        raise typer.Exit(code=1)

    table = Table(title=f"Learner {learner_id}", show_header=True, header_style="bold magenta")
    table.add_column("Class ID")
    table.add_column("Weighted Avg")
    for item in averages:
        table.add_row(str(item.class_id), _format_avg(item.avg))
    console.print(table)


@app.command()
def stats(
    class_id: Optional[int] = typer.Option(None, "--class-id", help="Restrict the cohort to one class."),
    threshold: Optional[float] = typer.Option(None, "--threshold", help="Pass threshold; defaults to the config value."),
    config: Path = ConfigOption,
) -> None:
    """
    Number and percentage of learners whose weighted average reaches the threshold.
    """
    cfg = _load(config)
    threshold = cfg.metrics.threshold if threshold is None else threshold
    try:
        report = build_service(cfg).cohort_report(threshold, class_filter=class_id)
    except GradeSourceError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)

    scope = "all classes" if class_id is None else f"class {class_id}"
    table = Table(title=f"Cohort ({scope}, threshold {threshold:g})", show_header=True, header_style="bold magenta")
    table.add_column("Total Learners")
    table.add_column("At/Above Threshold")
    table.add_column("Percentage")
    table.add_row(
        str(report.total_learners),
        str(report.learners_above_percentage),
        f"{report.percentage_above_percentage:.2f}%",
    )
    console.print(table)


@app.command()
def export(
    output_dir: Path = typer.Option(Path("reports"), "--output-dir", help="Directory to write exports."),
    threshold: Optional[float] = typer.Option(None, "--threshold", help="Pass threshold; defaults to the config value."),
    config: Path = ConfigOption,
) -> None:
    """Export learner averages, class averages, and cohort statistics."""
    cfg = _load(config)
    threshold = cfg.metrics.threshold if threshold is None else threshold
    try:
        paths = export_grade_reports(build_service(cfg), output_dir, threshold=threshold)
    except GradeSourceError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)
    for name, path in paths.items():
        console.print(f"[green]{name}[/green] → {path}")


@app.command("ensure-indexes")
def ensure_indexes(config: Path = ConfigOption) -> None:
    """Create the class, learner, and learner+class indexes on the grades collection."""
    cfg = _load(config)
    if cfg.source.kind != "mongo":
        console.print("[yellow]Index provisioning only applies to the mongo source.[/yellow]")
        raise typer.Exit(code=1)
    try:
        names = ensure_grade_indexes(build_collection(cfg))
    except GradeSourceError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)
    console.print(f"[bold]Indexes ready:[/bold] {', '.join(names)}")


def main():
    app()


if __name__ == "__main__":
    main()
