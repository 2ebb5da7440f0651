"""
Exception hierarchy for regoscope.

All regoscope exceptions inherit from RegoscopeError, allowing callers to catch
every failure surfaced by the engine facade with a single except clause.

Exception Categories:
    - ParseError: A policy failed to parse in the evaluation engine
    - EvalError: A query failed to evaluate
    - JsonError: An input or data document is not valid JSON
    - EngineError: Any other engine failure (including lock timeouts)
    - ConfigError: A workspace configuration could not be used

Every error carries an ``error_type`` tag (``parse_error``, ``eval_error``,
``json_error``, ``engine_error``, ``config_error``) so hosts can branch on the
category without importing the classes.

The rule scanner never raises; nothing in this module originates there.
"""

from dataclasses import dataclass, field
from typing import Any


# =============================================================================
# Error Codes
# =============================================================================

# Parse errors: 1xxx
ERROR_PARSE_POLICY = 1001

# Evaluation errors: 2xxx
ERROR_EVAL_QUERY = 2001

# JSON errors: 3xxx
ERROR_JSON_DECODE = 3001
ERROR_JSON_ENCODE = 3002

# Engine errors: 4xxx
ERROR_ENGINE = 4001
ERROR_ENGINE_LOCK_TIMEOUT = 4002
ERROR_ENGINE_BACKEND_UNAVAILABLE = 4003
ERROR_ENGINE_CLOSED = 4004

# Config errors: 5xxx
ERROR_CONFIG_INVALID = 5001
ERROR_CONFIG_FILE_MISSING = 5002


# =============================================================================
# Base Exception
# =============================================================================


@dataclass
class RegoscopeError(Exception):
    """
    Base exception for all regoscope errors.

    Attributes:
        message: Human-readable error description
        code: Numeric error code for programmatic handling
        suggestion: Optional hint for how to resolve the error
        context: Optional dict with additional debugging info
    """

    message: str = ""
    code: int = 0
    suggestion: str | None = None
    context: dict[str, Any] = field(default_factory=dict)

    error_type = "error"

    def __str__(self) -> str:
        """Format error for display."""
        parts = [f"[E{self.code}] {self.message}"]
        if self.suggestion:
            parts.append(f"\nSuggestion: {self.suggestion}")
        return "".join(parts)

    def __repr__(self) -> str:
        """Format error for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code}, "
            f"context={self.context!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error_type": self.error_type,
            "error_class": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "suggestion": self.suggestion,
            "context": self.context,
        }


# =============================================================================
# Engine Category Errors
# =============================================================================


@dataclass
class ParseError(RegoscopeError):
    """
    Raised when the engine rejects a policy's source.

    The source is still retained by the policy store, so rule
    inventories remain available for policies that failed to parse.

    Attributes:
        policy: Name the policy was registered under
    """

    policy: str = ""

    error_type = "parse_error"

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Failed to parse policy: {self.policy}"
        if self.code == 0:
            self.code = ERROR_PARSE_POLICY
        self.context["policy"] = self.policy


@dataclass
class EvalError(RegoscopeError):
    """Raised when a query cannot be evaluated."""

    query: str = ""

    error_type = "eval_error"

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Failed to evaluate query: {self.query}"
        if self.code == 0:
            self.code = ERROR_EVAL_QUERY
        self.context["query"] = self.query


@dataclass
class JsonError(RegoscopeError):
    """
    Raised when an input or data document is not usable JSON.

    Attributes:
        target: Which document was being set ("input" or "data")
    """

    target: str = ""

    error_type = "json_error"

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Invalid JSON for {self.target}"
        if self.code == 0:
            self.code = ERROR_JSON_DECODE
        self.context["target"] = self.target


@dataclass
class EngineError(RegoscopeError):
    """
    Raised for engine failures that are not parse, eval or JSON errors.

    Attributes:
        operation: The engine operation that failed (e.g., "add_data")
    """

    operation: str = ""

    error_type = "engine_error"

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Engine operation failed: {self.operation}"
        if self.code == 0:
            self.code = ERROR_ENGINE
        self.context["operation"] = self.operation


@dataclass
class LockTimeoutError(EngineError):
    """Raised when the engine lock cannot be acquired in time."""

    mode: str = ""
    timeout_seconds: float | None = None

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = (
                f"Timed out acquiring {self.mode} lock after {self.timeout_seconds}s"
            )
        if self.code == 0:
            self.code = ERROR_ENGINE_LOCK_TIMEOUT
        if not self.suggestion:
            self.suggestion = "Increase lock_timeout_seconds or avoid long-held engine calls"
        super().__post_init__()
        self.context.update({
            "mode": self.mode,
            "timeout_seconds": self.timeout_seconds,
        })


@dataclass
class BackendUnavailableError(EngineError):
    """Raised when the evaluation engine bindings cannot be loaded."""

    backend: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Engine backend not available: {self.backend}"
        if self.code == 0:
            self.code = ERROR_ENGINE_BACKEND_UNAVAILABLE
        if not self.suggestion:
            self.suggestion = f"Install it with: pip install {self.backend}"
        super().__post_init__()
        self.context["backend"] = self.backend


@dataclass
class EngineClosedError(EngineError):
    """Raised when an engine is used after close()."""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Engine is closed: cannot {self.operation}"
        if self.code == 0:
            self.code = ERROR_ENGINE_CLOSED
        super().__post_init__()


# =============================================================================
# Config Errors
# =============================================================================


@dataclass
class ConfigError(RegoscopeError):
    """Raised when a workspace configuration cannot be applied."""

    path: str = ""

    error_type = "config_error"

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Invalid configuration: {self.path}"
        if self.code == 0:
            self.code = ERROR_CONFIG_INVALID
        self.context["path"] = self.path


@dataclass
class ConfigFileMissingError(ConfigError):
    """Raised when a file named by the configuration does not exist."""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"File not found: {self.path}"
        if self.code == 0:
            self.code = ERROR_CONFIG_FILE_MISSING
        if not self.suggestion:
            self.suggestion = "Paths in the config are resolved relative to the config file"
        super().__post_init__()
