"""
Schema definitions for regoscope.

This module defines the Pydantic models used throughout regoscope:
- RuleRecord: One rule recovered from policy source by the scanner
- FileCoverage/CoverageReport: Coverage as reported by the evaluation engine
- RuleCoverage: Engine coverage mapped onto a rule's line range
- ScopeConfig: Workspace configuration loaded from YAML

Design Decisions:
    - Records are immutable (frozen=True); they are derived, never edited
    - Unknown fields are rejected (extra="forbid") so typos in config fail loudly
"""

from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# =============================================================================
# Enums
# =============================================================================


class Undefined(Enum):
    """Marker for a query that produced no value."""

    UNDEFINED = "undefined"

    def __repr__(self) -> str:
        return "UNDEFINED"


UNDEFINED = Undefined.UNDEFINED


class CoverageStatus(str, Enum):
    """How much of a rule's body the engine reported as executed."""

    COVERED = "covered"
    PARTIAL = "partial"
    NOT_COVERED = "not_covered"
    NO_DATA = "no_data"


# =============================================================================
# Rule Models
# =============================================================================


class RuleRecord(BaseModel):
    """
    A rule definition recovered from policy source.

    Attributes:
        name: Identifier from the rule head
        description: Comment line immediately above the head (may be empty)
        start_line: 1-based line of the rule head
        end_line: 1-based line of the rule's closing brace (inclusive)
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., description="Rule name from the rule head")
    description: str = Field(
        default="",
        description="Comment immediately preceding the rule head",
    )
    start_line: int = Field(..., description="1-based line of the rule head", ge=1)
    end_line: int = Field(..., description="1-based closing line (inclusive)", ge=1)

    @model_validator(mode="after")
    def validate_line_range(self) -> "RuleRecord":
        """A rule never ends before it starts."""
        if self.end_line < self.start_line:
            msg = f"end_line {self.end_line} is before start_line {self.start_line}"
            raise ValueError(msg)
        return self

    @property
    def line_count(self) -> int:
        """Number of source lines the rule occupies."""
        return self.end_line - self.start_line + 1

    def contains_line(self, line: int) -> bool:
        """Whether a 1-based line number falls inside this rule."""
        return self.start_line <= line <= self.end_line

    def to_dict(self) -> dict[str, Any]:
        """Plain mapping in the host-facing shape."""
        return {
            "name": self.name,
            "description": self.description,
            "start_line": self.start_line,
            "end_line": self.end_line,
        }


# =============================================================================
# Coverage Models
# =============================================================================


class FileCoverage(BaseModel):
    """Covered and not-covered lines the engine reported for one policy file."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    path: str = Field(..., description="Policy name the engine reported")
    covered: frozenset[int] = Field(default_factory=frozenset)
    not_covered: frozenset[int] = Field(default_factory=frozenset)


class CoverageReport(BaseModel):
    """
    Coverage report from the evaluation engine.

    Attributes:
        files: Per-file coverage keyed by policy name
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    files: dict[str, FileCoverage] = Field(default_factory=dict)

    @classmethod
    def from_engine(cls, raw: dict[str, Any]) -> "CoverageReport":
        """
        Build a report from the engine's JSON coverage document.

        The engine reports ``{"files": [{"path", "covered", "not_covered"}, ...]}``.
        """
        files: dict[str, FileCoverage] = {}
        for entry in raw.get("files", []):
            path = entry.get("path", "")
            files[path] = FileCoverage(
                path=path,
                covered=frozenset(entry.get("covered", [])),
                not_covered=frozenset(entry.get("not_covered", [])),
            )
        return cls(files=files)

    def to_dict(self) -> dict[str, dict[str, list[int]]]:
        """Plain mapping with sorted line lists."""
        return {
            path: {
                "covered": sorted(fc.covered),
                "not_covered": sorted(fc.not_covered),
            }
            for path, fc in self.files.items()
        }


class RuleCoverage(BaseModel):
    """
    Engine coverage restricted to one rule's line range.

    Attributes:
        rule: The rule the lines belong to
        covered: Executed lines inside the rule
        not_covered: Unexecuted lines inside the rule
        status: Summary of the two sets
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    rule: RuleRecord
    covered: frozenset[int] = Field(default_factory=frozenset)
    not_covered: frozenset[int] = Field(default_factory=frozenset)
    status: CoverageStatus = CoverageStatus.NO_DATA

    def to_dict(self) -> dict[str, Any]:
        """Plain mapping for JSON output."""
        return {
            **self.rule.to_dict(),
            "status": self.status.value,
            "covered": sorted(self.covered),
            "not_covered": sorted(self.not_covered),
        }


# =============================================================================
# Configuration
# =============================================================================


class ScopeConfig(BaseModel):
    """
    Workspace configuration for loading an engine.

    Paths and glob patterns are resolved relative to the config file.

    Attributes:
        policies: Glob patterns for Rego policy files
        data: Paths or globs for JSON data documents
        input: Optional path to a JSON input document
        coverage: Whether to enable engine coverage
        lock_timeout_seconds: How long engine calls wait for the lock
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    policies: list[str] = Field(
        default_factory=list,
        description="Glob patterns for policy files",
    )
    data: list[str] = Field(
        default_factory=list,
        description="JSON data documents",
    )
    input: str | None = Field(
        default=None,
        description="JSON input document",
    )
    coverage: bool = Field(
        default=False,
        description="Enable engine coverage tracking",
    )
    lock_timeout_seconds: float = Field(
        default=5.0,
        description="Seconds to wait for the engine lock",
        gt=0,
        le=300,
    )

    @field_validator("policies", "data")
    @classmethod
    def validate_patterns(cls, v: list[str]) -> list[str]:
        """Reject empty patterns."""
        for pattern in v:
            if not pattern.strip():
                msg = "Patterns must not be empty"
                raise ValueError(msg)
        return v


# =============================================================================
# YAML Loading Helpers
# =============================================================================


def load_config(path: Path | str) -> ScopeConfig:
    """
    Load a workspace configuration from a YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        Validated ScopeConfig object

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValidationError: If the YAML doesn't match the schema
    """
    path = Path(path)
    with path.open() as f:
        data = yaml.safe_load(f)

    return ScopeConfig.model_validate(data or {})


def load_config_from_string(content: str) -> ScopeConfig:
    """Load a workspace configuration from a YAML string."""
    data = yaml.safe_load(content)
    return ScopeConfig.model_validate(data or {})
