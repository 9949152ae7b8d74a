"""Configuration parsing from ``.gitops-coverage.yml``."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from gitops_coverage.analyzers.aggregate import DEFAULT_SOURCE_EXTENSIONS, source_file_pattern
from gitops_coverage.reporters.markdown import DEFAULT_INTRO, DEFAULT_TITLE

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".gitops-coverage.yml"

DEFAULT_JSON_SUMMARY_FILE = "./coverage/coverage-summary.json"
DEFAULT_LCOV_INFO_FILE = "./coverage/lcov.info"

# Environment fallbacks, used when the YAML file does not set a value
ENV_JSON_SUMMARY_FILE = "GITOPS_COVERAGE_JSON_SUMMARY_FILE_PATH"
ENV_LCOV_INFO_FILE = "GITOPS_COVERAGE_LCOV_INFO_FILE_PATH"
ENV_PROJECT_PATH = "GITOPS_COVERAGE_PROJECT_PATH"
ENV_OUTPUT_FILE = "GITOPS_COVERAGE_OUTPUT_FILE"
ENV_ALLOW_MISSING_TRACE = "GITOPS_COVERAGE_ALLOW_MISSING_TRACE"

_ENV_VAR_RE = re.compile(r"\$\{(\w+)\}")
_EXTENSION_RE = re.compile(r"^\.?[A-Za-z0-9_+-]+$")
_TRUTHY = {"1", "true", "yes", "on"}


def _resolve_env_vars(value: str) -> str:
    """Replace ``${VAR_NAME}`` placeholders with environment variable values."""

    def _replace(match: re.Match[str]) -> str:
        var = match.group(1)
        resolved = os.environ.get(var)
        if resolved is None:
            logger.warning("Environment variable %s is not set (referenced in config)", var)
            return ""
        return resolved

    return _ENV_VAR_RE.sub(_replace, value)


def _resolve_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Recursively resolve environment variables in a dictionary."""
    result: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, str):
            result[key] = _resolve_env_vars(value)
        elif isinstance(value, dict):
            result[key] = _resolve_dict(value)
        elif isinstance(value, list):
            result[key] = [
                _resolve_env_vars(item) if isinstance(item, str) else item for item in value
            ]
        else:
            result[key] = value
    return result


def _parse_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    return bool(value)


@dataclass
class CoverageConfig:
    """Where the coverage artifacts live and how to read them."""

    json_summary_file: str = DEFAULT_JSON_SUMMARY_FILE
    """Istanbul ``coverage-summary.json`` (optional input)."""

    lcov_info_file: str = DEFAULT_LCOV_INFO_FILE
    """lcov ``lcov.info`` trace (required input)."""

    project_path: str = ""
    """Prefix stripped from summary paths; defaults to the project root."""

    output_file: str = ""
    """Markdown destination; empty means standard output."""

    allow_missing_trace: bool = False
    """Build a statistics-only report when the lcov trace is missing."""

    source_extensions: list[str] = field(default_factory=lambda: list(DEFAULT_SOURCE_EXTENSIONS))
    """File extensions that mark a tree entry as a source file."""


@dataclass
class ReportConfig:
    """Wording of the generated comment."""

    intro: str = DEFAULT_INTRO
    """Sentence printed above the collapsible table."""

    title: str = DEFAULT_TITLE
    """Summary line of the ``<details>`` block."""


@dataclass
class GitopsCoverageConfig:
    """Complete configuration from ``.gitops-coverage.yml``."""

    root: str
    """Project root directory; relative paths resolve against it."""

    coverage: CoverageConfig = field(default_factory=CoverageConfig)
    """Input/output locations."""

    report: ReportConfig = field(default_factory=ReportConfig)
    """Comment wording."""

    raw: dict[str, Any] = field(default_factory=dict)
    """Raw parsed YAML for extension/debugging."""

    def _resolve(self, value: str) -> Path:
        path = Path(value).expanduser()
        if not path.is_absolute():
            path = Path(self.root) / path
        return path

    @property
    def json_summary_path(self) -> Path | None:
        """Absolute location of the summary file, if one is configured."""
        if not self.coverage.json_summary_file:
            return None
        return self._resolve(self.coverage.json_summary_file)

    @property
    def lcov_info_path(self) -> Path:
        """Absolute location of the lcov trace."""
        return self._resolve(self.coverage.lcov_info_file)

    @property
    def output_path(self) -> Path | None:
        """Absolute location of the report file, ``None`` for standard output."""
        if not self.coverage.output_file:
            return None
        return self._resolve(self.coverage.output_file)

    @property
    def project_root(self) -> str:
        """Prefix stripped from absolute paths in the coverage artifacts."""
        if not self.coverage.project_path:
            return self.root
        return str(self._resolve(self.coverage.project_path))

    @property
    def source_pattern(self) -> re.Pattern[str]:
        """Compiled pattern recognizing source file names."""
        return source_file_pattern(self.coverage.source_extensions)


def _setting(
    section: dict[str, Any], key: str, default: Any, env_var: str | None = None
) -> Any:
    """Return *key* from *section*, else *env_var*, else *default*.

    An explicit YAML ``null`` counts as unset. An empty string does not.
    """
    value = section.get(key)
    if value is not None:
        return value
    if env_var is not None:
        return os.environ.get(env_var) or default
    return default


def _parse_coverage_config(raw: dict[str, Any]) -> CoverageConfig:
    """Parse the ``coverage`` section, falling back to environment variables."""
    coverage_raw = raw.get("coverage", {})
    if not isinstance(coverage_raw, dict):
        coverage_raw = {}

    extensions_raw = _setting(coverage_raw, "source_extensions", list(DEFAULT_SOURCE_EXTENSIONS))
    if not isinstance(extensions_raw, list):
        logger.warning("coverage.source_extensions must be a list, using defaults")
        extensions_raw = list(DEFAULT_SOURCE_EXTENSIONS)

    return CoverageConfig(
        json_summary_file=str(
            _setting(
                coverage_raw, "json_summary_file", DEFAULT_JSON_SUMMARY_FILE, ENV_JSON_SUMMARY_FILE
            )
        ),
        lcov_info_file=str(
            _setting(coverage_raw, "lcov_info_file", DEFAULT_LCOV_INFO_FILE, ENV_LCOV_INFO_FILE)
        ),
        project_path=str(_setting(coverage_raw, "project_path", "", ENV_PROJECT_PATH)),
        output_file=str(_setting(coverage_raw, "output_file", "", ENV_OUTPUT_FILE)),
        allow_missing_trace=_parse_bool(
            _setting(coverage_raw, "allow_missing_trace", False, ENV_ALLOW_MISSING_TRACE)
        ),
        source_extensions=[str(ext) for ext in extensions_raw],
    )


def _parse_report_config(raw: dict[str, Any]) -> ReportConfig:
    """Parse the ``report`` section."""
    report_raw = raw.get("report", {})
    if not isinstance(report_raw, dict):
        report_raw = {}

    return ReportConfig(
        intro=str(_setting(report_raw, "intro", DEFAULT_INTRO)),
        title=str(_setting(report_raw, "title", DEFAULT_TITLE)),
    )


def load_config(root: str | Path) -> GitopsCoverageConfig:
    """Load and parse ``.gitops-coverage.yml`` from *root*.

    Falls back to environment variables and defaults when the YAML file is
    missing or incomplete.
    """
    root_path = Path(root).resolve()
    config_file = root_path / CONFIG_FILE_NAME

    raw: dict[str, Any] = {}
    if config_file.is_file():
        parsed = yaml.safe_load(config_file.read_text(encoding="utf-8"))
        if isinstance(parsed, dict):
            raw = _resolve_dict(parsed)
        elif parsed is not None:
            logger.warning("%s does not contain a mapping, ignoring it", config_file)

    return GitopsCoverageConfig(
        root=str(root_path),
        coverage=_parse_coverage_config(raw),
        report=_parse_report_config(raw),
        raw=raw,
    )


def _validate_coverage_config(coverage: CoverageConfig) -> list[str]:
    """Validate input/output settings."""
    errors: list[str] = []

    if not coverage.lcov_info_file:
        errors.append("coverage.lcov_info_file is required")

    if not coverage.source_extensions:
        errors.append("coverage.source_extensions must list at least one extension")

    errors.extend(
        f"coverage.source_extensions contains an invalid extension (got: {ext!r})"
        for ext in coverage.source_extensions
        if not _EXTENSION_RE.match(ext)
    )

    return errors


def _validate_report_config(report: ReportConfig) -> list[str]:
    """Validate comment wording."""
    errors: list[str] = []

    if not report.title.strip():
        errors.append("report.title must not be empty")

    if "\n" in report.title:
        errors.append("report.title must be a single line")

    return errors


def validate_config(config: GitopsCoverageConfig) -> list[str]:
    """Validate the configuration and return a list of error messages.

    Returns an empty list if the configuration is valid.
    """
    errors: list[str] = []

    if not config.root:
        errors.append("root is required")

    errors.extend(_validate_coverage_config(config.coverage))
    errors.extend(_validate_report_config(config.report))

    return errors
