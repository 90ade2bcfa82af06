"""CLI interface for oaslint using Typer framework."""

import json as jsonlib
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from oaslint import __description__, __version__
from oaslint.config import LintConfig, OutputFormat, RuleCatalogError, load_config, load_rule_catalog
from oaslint.document import DocumentError, DocumentIndex, load_document
from oaslint.validation import Outcome, RuleEngine, ValidationResult, default_registry

EXIT_CONFIG_ERROR = 2

app = typer.Typer(
    name="oaslint",
    help=__description__,
    add_completion=False,
    rich_markup_mode="rich"
)

console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)


def _configure_logging(config: LintConfig, verbose: bool) -> None:
    level = logging.DEBUG if verbose else config.logging.level.to_logging()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def version_callback(value: bool) -> None:
    """Show version information and exit."""
    if value:
        console.print(f"oaslint version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-V", callback=version_callback, help="Show version and exit")
    ] = False,
) -> None:
    """oaslint - Rule-driven linter for OpenAPI contract documents."""


@app.command()
def validate(
    specs: Annotated[
        list[Path],
        typer.Argument(help="OpenAPI/Swagger documents (YAML or JSON) to lint")
    ],
    rules: Annotated[
        Optional[Path],
        typer.Option("--rules", "-r", help="Rule catalog YAML file (default: 'rules' from config)")
    ] = None,
    format: Annotated[
        Optional[str],
        typer.Option("--format", "-f", help="Output format: table, json, markdown (default: table)")
    ] = None,
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Configuration file path (default: search for .oaslint.json)")
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging")
    ] = False,
) -> None:
    """Lint OpenAPI documents against a rule catalog."""
    valid_formats = [f.value for f in OutputFormat]

    try:
        lint_config = load_config(config)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(EXIT_CONFIG_ERROR)

    _configure_logging(lint_config, verbose)

    output_format = format or lint_config.output.format.value
    if output_format not in valid_formats:
        console.print(f"[red]Error:[/red] Invalid format '{output_format}'. Must be one of: {', '.join(valid_formats)}")
        raise typer.Exit(EXIT_CONFIG_ERROR)

    rules_path = rules or lint_config.rules_path()
    if rules_path is None:
        console.print("[red]Error:[/red] No rule catalog given. Use --rules or set 'rules' in .oaslint.json")
        raise typer.Exit(EXIT_CONFIG_ERROR)

    try:
        catalog = load_rule_catalog(rules_path)
        engine = RuleEngine(catalog, config=lint_config)
    except (RuleCatalogError, ValueError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(EXIT_CONFIG_ERROR)

    if engine.skipped:
        logger.info(f"Skipped rules: {', '.join(engine.skipped)}")

    results: list[ValidationResult] = []
    for spec_path in specs:
        try:
            root = load_document(spec_path)
        except (FileNotFoundError, DocumentError) as e:
            console.print(f"[red]Error:[/red] {escape(str(e))}")
            raise typer.Exit(1)

        result = engine.validate(DocumentIndex.from_document(root), document=str(spec_path))
        results.append(result)

        if output_format == "table":
            _print_table(result)
        elif output_format == "markdown":
            _print_markdown(result)

    if output_format == "json":
        print(jsonlib.dumps({"results": [r.to_dict() for r in results]}, indent=2))

    if any(result.outcome == Outcome.FAIL for result in results):
        raise typer.Exit(1)


def _print_table(result: ValidationResult) -> None:
    status_color = {
        Outcome.PASS: "green",
        Outcome.PASS_WITH_WARNINGS: "yellow",
        Outcome.FAIL: "red",
    }[result.outcome]
    console.print(f"\n[bold]{result.document}[/bold]")
    console.print(f"[{status_color}]Lint Status: {result.outcome.value.upper()}[/{status_color}]")

    if not result.violations:
        console.print("[green]No violations found[/green]")
        return

    table = Table()
    table.add_column("Rule", style="cyan")
    table.add_column("Severity", style="white")
    table.add_column("Message", style="white")
    table.add_column("Location", style="dim")

    for violation in result.violations:
        severity_color = "red" if violation.severity.value == "error" else "yellow"
        table.add_row(
            violation.rule,
            f"[{severity_color}]{violation.severity.value.upper()}[/{severity_color}]",
            escape(violation.message),
            escape(violation.field_path or ""),
        )

    console.print(table)


def _print_markdown(result: ValidationResult) -> None:
    print(f"# Lint Report: {result.document}")
    print(f"**Status:** {result.outcome.value}")
    print(f"**Exit Code:** {result.exit_code}")
    print()

    if result.violations:
        print("## Violations")
        for violation in result.violations:
            location = f" (`{violation.field_path}`)" if violation.field_path else ""
            print(f"- **{violation.severity.value.upper()}** {violation.rule}: {violation.message}{location}")


@app.command(name="rules")
def list_rules() -> None:
    """List the rule identifiers this version implements."""
    table = Table(title="Available Rules")
    table.add_column("Rule", style="cyan")
    table.add_column("Scope", style="white")
    table.add_column("Check", style="dim")

    for rule_id in default_registry.ids:
        rule_class = default_registry.rule_class(rule_id)
        summary = rule_class.__doc__.strip().splitlines()[0] if rule_class.__doc__ else ""
        table.add_row(rule_id, rule_class.scope.value, summary)

    console.print(table)


if __name__ == "__main__":
    app()
