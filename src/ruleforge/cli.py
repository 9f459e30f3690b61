"""CLI interface for ruleforge using Typer framework."""

import importlib
import json as jsonlib
import logging
from pathlib import Path
from typing import Annotated, Any, List, Optional

import typer
from rich.console import Console
from rich.table import Table

from ruleforge import __description__, __version__
from ruleforge.config import LogLevel, load_config
from ruleforge.exceptions import ConfigurationError
from ruleforge.validation import ValidationOptions, ValidationResult, Validator

app = typer.Typer(
    name="ruleforge",
    help=__description__,
    add_completion=False,
    rich_markup_mode="rich"
)

console = Console()
logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    LogLevel.ERROR: logging.ERROR,
    LogLevel.WARN: logging.WARNING,
    LogLevel.INFO: logging.INFO,
    LogLevel.DEBUG: logging.DEBUG,
}

EXIT_INVALID = 1
EXIT_CONFIGURATION = 2


def version_callback(value: bool) -> None:
    """Show version information and exit."""
    if value:
        console.print(f"ruleforge version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", callback=version_callback, help="Show version and exit")
    ] = False,
) -> None:
    """ruleforge - declarative object validation."""


def load_validator(target: str) -> Validator:
    """Resolve ``module:attribute`` to a Validator.

    The attribute may be a Validator instance, a Validator subclass, or a
    zero-argument factory returning a Validator.

    Raises:
        ConfigurationError: If the target cannot be imported or is not a validator
    """
    module_name, sep, attribute = target.partition(":")
    if not sep or not module_name or not attribute:
        raise ConfigurationError(f"Target must look like 'module:attribute', got '{target}'")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import module '{module_name}': {e}")

    try:
        obj: Any = getattr(module, attribute)
    except AttributeError:
        raise ConfigurationError(f"Module '{module_name}' has no attribute '{attribute}'")

    if isinstance(obj, type) and issubclass(obj, Validator):
        obj = obj()
    elif not isinstance(obj, Validator) and callable(obj):
        obj = obj()

    if not isinstance(obj, Validator):
        raise ConfigurationError(f"'{target}' does not resolve to a Validator")
    return obj


def _load_documents(data: Path) -> list[Any]:
    with open(data, encoding="utf-8") as f:
        payload = jsonlib.load(f)
    return payload if isinstance(payload, list) else [payload]


def _print_results(results: list[ValidationResult], multiple: bool) -> None:
    invalid = [result for result in results if not result.is_valid]
    if not invalid:
        console.print(f"[green]All {len(results)} document(s) are valid[/green]")
        return

    table = Table()
    if multiple:
        table.add_column("Document", style="dim", justify="right")
    table.add_column("Property", style="cyan")
    table.add_column("Severity", style="white")
    table.add_column("Code", style="dim")
    table.add_column("Message", style="white")

    for index, result in enumerate(results):
        for failure in result.errors:
            color = "red" if failure.severity.value == "error" else "yellow" if failure.severity.value == "warning" else "green"
            row = [
                failure.property_name or "<root>",
                f"[{color}]{failure.severity.value.upper()}[/{color}]",
                failure.error_code or "",
                failure.error_message,
            ]
            if multiple:
                row.insert(0, str(index))
            table.add_row(*row)

    console.print(f"[red]{len(invalid)} of {len(results)} document(s) failed validation[/red]")
    console.print(table)


@app.command()
def validate(
    target: Annotated[
        str,
        typer.Argument(help="Validator to run, as module:attribute")
    ],
    data: Annotated[
        Path,
        typer.Argument(help="JSON file holding one object or a list of objects")
    ],
    rule_set: Annotated[
        Optional[List[str]],
        typer.Option("--rule-set", "-r", help="Rule set(s) to run (default: rules outside any set)")
    ] = None,
    include: Annotated[
        Optional[List[str]],
        typer.Option("--include", "-i", help="Only validate these properties")
    ] = None,
    format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: table, json (default: table)")
    ] = "table",
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Configuration file path (default: search for .ruleforge.json)")
    ] = None,
) -> None:
    """Validate JSON documents with a declared validator."""
    valid_formats = ["table", "json"]
    if format not in valid_formats:
        console.print(f"[red]Error:[/red] Invalid format '{format}'. Must be one of: {', '.join(valid_formats)}")
        raise typer.Exit(EXIT_CONFIGURATION)

    try:
        ruleforge_config = load_config(config)
        logging.basicConfig(level=_LOG_LEVELS[ruleforge_config.logging.level])

        validator = load_validator(target)
        documents = _load_documents(data)
        options = ValidationOptions(rule_sets=rule_set or [], include_properties=include or [])

        logger.info(f"Validating {len(documents)} document(s) from {data} with {target}")
        results = [validator.validate(document, options) for document in documents]
    except (ConfigurationError, ValueError, OSError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(EXIT_CONFIGURATION)

    if format == "json":
        payload = [result.to_dict() for result in results]
        typer.echo(jsonlib.dumps(payload if len(payload) > 1 else payload[0], indent=2))
    else:
        _print_results(results, multiple=len(results) > 1)

    raise typer.Exit(EXIT_INVALID if any(not result.is_valid for result in results) else 0)


@app.command()
def describe(
    target: Annotated[
        str,
        typer.Argument(help="Validator to describe, as module:attribute")
    ],
) -> None:
    """List the validators declared for each member."""
    try:
        validator = load_validator(target)
    except ConfigurationError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(EXIT_CONFIGURATION)

    descriptor = validator.create_descriptor()
    table = Table(title=type(validator).__name__)
    table.add_column("Member", style="cyan")
    table.add_column("Validator", style="white")
    table.add_column("Code", style="dim")
    table.add_column("Rule sets", style="dim")

    for rule in descriptor.rules:
        rule_sets = ", ".join(rule.rule_sets) or "default"
        for component in rule.components:
            table.add_row(
                rule.member.name or "<model>",
                repr(component.validator),
                component.validator.error_code or component.validator.name,
                rule_sets,
            )
        for dependent in rule.dependent_rules:
            for component in dependent.components:
                table.add_row(
                    f"{rule.member.name or '<model>'} -> {dependent.member.name or '<model>'}",
                    repr(component.validator),
                    component.validator.error_code or component.validator.name,
                    rule_sets,
                )

    console.print(table)


if __name__ == "__main__":
    app()
