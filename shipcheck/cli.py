"""shipcheck command line: scan a workspace, list the rule catalog."""

import sys

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from shipcheck import __version__
from shipcheck.agents.orchestrator import run_audit
from shipcheck.audit.reporter import ReportFormat, ReportGenerator, sort_findings
from shipcheck.audit.rules import default_registry
from shipcheck.config import configure_logging, get_settings
from shipcheck.discovery import discover
from shipcheck.exceptions import ShipcheckError
from shipcheck.models import AuditReport, Category, Decision, Severity

console = Console()

SEVERITY_STYLES = {
    Severity.ERROR: "bold red",
    Severity.WARNING: "yellow",
    Severity.INFO: "cyan",
}


@click.group()
@click.version_option(__version__, prog_name="shipcheck")
@click.option("--log-level", default=None, help="Log level (defaults to SHIPCHECK_LOG_LEVEL or INFO)")
def cli(log_level) -> None:
    """shipcheck - deployment readiness audit."""
    settings = get_settings()
    configure_logging(log_level or settings.log_level, settings.log_json)


@cli.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False), default=".")
@click.option(
    "--format", "-f", "fmt",
    type=click.Choice([f.value for f in ReportFormat]),
    default=None,
    help="Print the report in this format instead of the summary table",
)
@click.option("--output", "-o", type=click.Path(dir_okay=False), default=None, help="Also write the report to a file")
@click.option("--ignore", "-i", multiple=True, help="Extra glob pattern to skip (repeatable)")
@click.option("--fail-on-no-go/--no-fail-on-no-go", default=True, help="Exit with status 1 on a NO-GO decision")
def scan(path, fmt, output, ignore, fail_on_no_go) -> None:
    """Audit every source file under PATH."""
    settings = get_settings()
    try:
        files = list(discover(path, [*settings.extra_ignores, *ignore]))
        report = run_audit(files, settings=settings)
    except ShipcheckError as e:
        raise click.ClickException(str(e)) from e

    generator = ReportGenerator()
    if output:
        generator.save_report(report, output, ReportFormat(fmt) if fmt else None)

    if fmt:
        click.echo(generator.generate(report, ReportFormat(fmt)))
    else:
        _print_summary(report, len(files))

    if fail_on_no_go and report.decision == Decision.NO_GO:
        sys.exit(1)


@cli.command()
@click.option(
    "--category", "-c",
    type=click.Choice([c.value for c in Category]),
    default=None,
    help="Only list rules of this category",
)
def rules(category) -> None:
    """List the detection rules."""
    table = Table(title="Detection Rules")
    table.add_column("ID", style="bold", no_wrap=True)
    table.add_column("Category")
    table.add_column("Severity")
    table.add_column("Matcher")
    table.add_column("Title")

    for rule in default_registry():
        if category and rule.category.value != category:
            continue
        table.add_row(
            rule.rule_id,
            rule.category.value,
            f"[{SEVERITY_STYLES[rule.severity]}]{rule.severity.value}[/]",
            type(rule.matcher).__name__,
            rule.title,
        )

    console.print(table)


def _print_summary(report: AuditReport, file_count: int) -> None:
    go = report.decision == Decision.GO
    console.print(
        Panel(
            f"[bold]{report.decision.value}[/]  score [bold]{report.score}/100[/]\n"
            f"Files scanned: {file_count}   "
            f"Errors: {report.error_count}   "
            f"Warnings: {report.warning_count}   "
            f"Info: {report.info_count}",
            title="shipcheck",
            border_style="green" if go else "red",
        )
    )

    if report.partial:
        for failure in report.failures:
            console.print(f"[bold red]✗[/] {failure.agent} agent failed: {escape(failure.error)}")

    if not report.findings:
        console.print("[green]✓[/] No findings.")
        return

    table = Table(title="Findings")
    table.add_column("Severity")
    table.add_column("Rule", no_wrap=True)
    table.add_column("Location")
    table.add_column("Description")
    for f in sort_findings(report.findings):
        table.add_row(
            f"[{SEVERITY_STYLES[f.severity]}]{f.severity.value}[/]",
            f.rule_id,
            escape(f"{f.file_path}:{f.line_number}"),
            escape(f.description),
        )
    console.print(table)


if __name__ == "__main__":
    cli()
