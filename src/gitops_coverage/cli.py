"""gitops-coverage CLI: top-level command group."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, replace
from typing import Any, TypedDict, Unpack

import click
import yaml
from rich.console import Console

from gitops_coverage import __version__
from gitops_coverage.config import GitopsCoverageConfig, load_config, validate_config
from gitops_coverage.errors import ReportWriteError, TraceNotFoundError
from gitops_coverage.models.coverage import summary_to_dict
from gitops_coverage.pipeline import generate_report, run_report
from gitops_coverage.reporters.terminal import CLIReporter, reporter

logger = logging.getLogger(__name__)

_FORMATS = ("markdown", "terminal")


class _ReportKwargs(TypedDict):
    """Keyword arguments for the report CLI command."""

    path: str
    summary: str | None
    lcov: str | None
    project_path: str | None
    output: str | None
    allow_missing_trace: bool
    as_json: bool
    output_format: str


def _config_to_dict(config: GitopsCoverageConfig) -> dict[str, Any]:
    """Convert the configuration to a dictionary for display."""
    result = asdict(config)
    # Remove the raw field as it's redundant
    result.pop("raw", None)
    return result


def _load_or_abort(path: str) -> GitopsCoverageConfig:
    logger.debug("Loading configuration from %s", path)
    try:
        return load_config(path)
    except (OSError, yaml.YAMLError) as e:
        reporter.print_error(f"Failed to load configuration: {e}")
        raise click.Abort from e


def _apply_overrides(config: GitopsCoverageConfig, kwargs: _ReportKwargs) -> GitopsCoverageConfig:
    """Layer command-line options over the loaded configuration."""
    overrides: dict[str, Any] = {}
    if kwargs["summary"] is not None:
        overrides["json_summary_file"] = kwargs["summary"]
    if kwargs["lcov"] is not None:
        overrides["lcov_info_file"] = kwargs["lcov"]
    if kwargs["project_path"] is not None:
        overrides["project_path"] = kwargs["project_path"]
    if kwargs["output"] is not None:
        overrides["output_file"] = kwargs["output"]
    if kwargs["allow_missing_trace"]:
        overrides["allow_missing_trace"] = True

    if not overrides:
        return config
    return replace(config, coverage=replace(config.coverage, **overrides))


def _abort_on_invalid(config: GitopsCoverageConfig) -> None:
    errors = validate_config(config)
    if not errors:
        return
    reporter.print_error(f"Found {len(errors)} configuration error(s):")
    for idx, error in enumerate(errors, start=1):
        reporter.console.print(f"  {idx}. [red]{error}[/red]")
    raise click.Abort


@click.group()
@click.version_option(version=__version__, prog_name="gitops-coverage")
def cli() -> None:
    """gitops-coverage: turn coverage artifacts into a code-review comment."""


@cli.command()
@click.option(
    "--path",
    default=".",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    help="Project root directory (where .gitops-coverage.yml lives).",
)
@click.option("--summary", default=None, help="Istanbul coverage-summary.json file.")
@click.option("--lcov", default=None, help="lcov.info trace file.")
@click.option(
    "--project-path",
    default=None,
    help="Prefix stripped from absolute paths in the coverage files.",
)
@click.option(
    "--output",
    "-o",
    default=None,
    help="Write the markdown report here instead of standard output.",
)
@click.option(
    "--allow-missing-trace",
    is_flag=True,
    help="Build a statistics-only report when the lcov trace is missing.",
)
@click.option(
    "--json-output",
    "as_json",
    is_flag=True,
    help="Print the merged coverage summary as JSON instead of a report.",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(_FORMATS),
    default="markdown",
    show_default=True,
    help="Report format. 'terminal' prints a table and never writes a file.",
)
def report(**kwargs: Unpack[_ReportKwargs]) -> None:
    """Generate the coverage report.

    Reads the lcov trace and the Istanbul summary, and prints a markdown
    comment (or writes it to --output).

    Example:
      gitops-coverage report --lcov coverage/lcov.info -o coverage.md
    """
    config = _apply_overrides(_load_or_abort(kwargs["path"]), kwargs)
    _abort_on_invalid(config)

    try:
        if kwargs["as_json"] or kwargs["output_format"] == "terminal":
            result = generate_report(config)
            written = None
        else:
            result, written = run_report(config)
    except (TraceNotFoundError, ReportWriteError) as e:
        reporter.print_error(str(e))
        raise click.Abort from e

    if not result.trace_found:
        reporter.print_warning("No lcov trace found, uncovered line ranges are not reported")

    if kwargs["as_json"]:
        click.echo(json.dumps(summary_to_dict(result.summary), indent=2))
    elif kwargs["output_format"] == "terminal":
        CLIReporter(Console()).print_coverage_tree(
            result.total, result.tree, pattern=config.source_pattern
        )
    elif written is not None:
        reporter.print_success(f"Successfully wrote gitops coverage markdown to {written}")
    else:
        click.echo(result.document, nl=False)


@cli.group("config")
def config_group() -> None:
    """Inspect `.gitops-coverage.yml` configuration."""


@config_group.command("show")
@click.option(
    "--path",
    default=".",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    help="Project root directory.",
)
@click.option(
    "--json-output",
    "as_json",
    is_flag=True,
    help="Output as JSON instead of YAML.",
)
def config_show(path: str, *, as_json: bool) -> None:
    """Display the resolved configuration.

    Shows the configuration with environment variables and defaults applied.

    Example:
      gitops-coverage config show
      gitops-coverage config show --json-output
    """
    config_dict = _config_to_dict(_load_or_abort(path))

    if as_json:
        click.echo(json.dumps(config_dict, indent=2))
    else:
        click.echo(yaml.safe_dump(config_dict, sort_keys=False, default_flow_style=False))


@config_group.command("validate")
@click.option(
    "--path",
    default=".",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    help="Project root directory.",
)
def config_validate(path: str) -> None:
    """Validate `.gitops-coverage.yml`.

    Example:
      gitops-coverage config validate
    """
    config = _load_or_abort(path)
    _abort_on_invalid(config)
    reporter.print_success("Configuration is valid!")
