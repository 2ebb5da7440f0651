"""
Engine facade for regoscope.

The Engine is the host-facing surface. It owns one evaluation backend and
one policy store, and coordinates between them:
- Backend: parses policies, binds input/data, evaluates queries, tracks coverage
- PolicyStore: keeps each policy's raw source for the rule scanner
- Scanner: derives rule inventories from the stored source on demand

Access Flow:
    1. Every call takes the reader/writer lock (bounded by lock_timeout)
    2. Writes (registration, input, data, evaluation) take it exclusively
    3. Reads (packages, coverage report, rule inventory) share it
    4. Backend failures are re-raised as ParseError, EvalError, JsonError
       or EngineError carrying the engine's message

Design Principles:
    - Nothing is reimplemented: evaluation semantics belong to the backend
    - Rule inventories are never cached; they always match the stored source
    - A policy is stored before the backend parses it, so a policy that fails
      to parse still has a rule inventory
"""

import json
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from regoscope.backend import Backend, RegorusBackend
from regoscope.errors import (
    ERROR_JSON_ENCODE,
    ConfigFileMissingError,
    EngineClosedError,
    EngineError,
    EvalError,
    JsonError,
    ParseError,
    RegoscopeError,
)
from regoscope.report.coverage import map_rule_coverage
from regoscope.scanner import extract_all
from regoscope.schema import (
    UNDEFINED,
    CoverageReport,
    RuleCoverage,
    RuleRecord,
    ScopeConfig,
    Undefined,
)
from regoscope.store import PolicyStore, ReadWriteLock
from regoscope.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_LOCK_TIMEOUT = 5.0


class Engine:
    """
    Rego policy engine with rule inventory support.

    Usage:
        with Engine() as engine:
            engine.add_policy("authz.rego", source)
            engine.set_input({"user": "alice"})
            allowed = engine.eval_query("data.authz.allow")
            rules = engine.get_rules()

    Attributes:
        backend: The evaluation backend calls are delegated to
        store: Raw source of every registered policy
        lock_timeout: Seconds to wait for the engine lock (None waits forever)
    """

    def __init__(
        self,
        backend: Backend | None = None,
        lock_timeout: float | None = DEFAULT_LOCK_TIMEOUT,
    ) -> None:
        """
        Initialize the engine.

        Args:
            backend: Evaluation backend (defaults to a new regorus engine)
            lock_timeout: Seconds to wait for the engine lock

        Raises:
            BackendUnavailableError: If no backend is given and regorus is missing
        """
        self.backend: Backend | None = backend if backend is not None else RegorusBackend()
        self.store = PolicyStore()
        self.lock_timeout = lock_timeout
        self._lock = ReadWriteLock()

    @classmethod
    def new(cls, **kwargs: Any) -> "Engine":
        """Create a new engine."""
        return cls(**kwargs)

    @classmethod
    def from_config(
        cls,
        config: ScopeConfig,
        base_dir: str | Path = ".",
        backend: Backend | None = None,
    ) -> "Engine":
        """
        Create an engine loaded from a workspace configuration.

        Policies are registered under their path relative to ``base_dir``
        so coverage and rule reports use stable names.

        Args:
            config: Validated workspace configuration
            base_dir: Directory that config paths are relative to
            backend: Evaluation backend (defaults to regorus)

        Raises:
            ConfigFileMissingError: If a named data or input file doesn't exist
            ParseError, JsonError, EngineError: If the engine rejects a file
        """
        base = Path(base_dir)
        engine = cls(backend=backend, lock_timeout=config.lock_timeout_seconds)

        try:
            for path in resolve_patterns(base, config.policies):
                engine.add_policy(_display_name(path, base), path.read_text())

            for path in resolve_patterns(base, config.data):
                engine.add_data_json(path.read_text())

            if config.input:
                input_path = base / config.input
                if not input_path.is_file():
                    raise ConfigFileMissingError(path=str(input_path))
                engine.set_input_json(input_path.read_text())

            if config.coverage:
                engine.enable_coverage(True)
        except RegoscopeError:
            engine.close()
            raise

        return engine

    # =========================================================================
    # Locking
    # =========================================================================

    @contextmanager
    def _reading(self, operation: str) -> Iterator[Backend]:
        with self._lock.read(self.lock_timeout):
            yield self._require_backend(operation)

    @contextmanager
    def _writing(self, operation: str) -> Iterator[Backend]:
        with self._lock.write(self.lock_timeout):
            yield self._require_backend(operation)

    def _require_backend(self, operation: str) -> Backend:
        if self.backend is None:
            raise EngineClosedError(operation=operation)
        return self.backend

    # =========================================================================
    # Policies
    # =========================================================================

    def add_policy(self, name: str, source: str) -> str:
        """
        Register a policy.

        The source is stored for rule extraction even if the engine then
        rejects it.

        Args:
            name: Policy name (e.g. "authz.rego")
            source: Raw Rego source

        Returns:
            The policy's package path reported by the engine

        Raises:
            ParseError: If the engine cannot parse the policy
        """
        with self._writing("add_policy") as backend:
            self.store.put(name, source)
            try:
                package = backend.add_policy(name, source)
            except Exception as e:
                raise ParseError(message=str(e), policy=name) from e

        logger.debug("Added policy %s (%s)", name, package)
        return package

    def get_packages(self) -> list[str]:
        """
        Package paths of all loaded policies.

        Raises:
            EngineError: If the engine fails to list packages
        """
        with self._reading("get_packages") as backend:
            try:
                return list(backend.get_packages())
            except Exception as e:
                raise EngineError(message=str(e), operation="get_packages") from e

    def get_rules(self) -> dict[str, list[RuleRecord]]:
        """
        Rule inventory of every registered policy.

        Recomputed from the stored source on every call.

        Returns:
            Policy name to its rules in source order
        """
        with self._reading("get_rules"):
            policies = self.store.get_all()
        return extract_all(policies)

    # =========================================================================
    # Input and Data
    # =========================================================================

    def set_input(self, value: Any) -> None:
        """
        Set the input document from a JSON-encodable value.

        Raises:
            JsonError: If the value cannot be encoded as JSON
        """
        self.set_input_json(_encode_json(value, "input"))

    def set_input_json(self, text: str) -> None:
        """
        Set the input document from JSON text.

        Raises:
            JsonError: If the text is not valid JSON or the engine rejects it
        """
        _check_json(text, "input")
        with self._writing("set_input") as backend:
            try:
                backend.set_input_json(text)
            except Exception as e:
                raise JsonError(message=str(e), target="input") from e

    def add_data(self, value: Any) -> None:
        """
        Merge a JSON-encodable value into the data document.

        Raises:
            JsonError: If the value cannot be encoded as JSON
            EngineError: If the engine rejects the document
        """
        self.add_data_json(_encode_json(value, "data"))

    def add_data_json(self, text: str) -> None:
        """
        Merge a JSON document into the data document.

        Raises:
            JsonError: If the text is not valid JSON
            EngineError: If the engine rejects the document (e.g. a conflict)
        """
        _check_json(text, "data")
        with self._writing("add_data") as backend:
            try:
                backend.add_data_json(text)
            except Exception as e:
                raise EngineError(message=str(e), operation="add_data") from e

    def clear_data(self) -> None:
        """Drop the data document; policies and input are kept."""
        with self._writing("clear_data") as backend:
            try:
                backend.clear_data()
            except Exception as e:
                raise EngineError(message=str(e), operation="clear_data") from e

    # =========================================================================
    # Evaluation
    # =========================================================================

    def eval_query(self, query: str) -> Any | Undefined:
        """
        Evaluate a query.

        Args:
            query: Rego query (e.g. "data.authz.allow")

        Returns:
            The first expression value of the first result, or UNDEFINED

        Raises:
            EvalError: If the engine cannot evaluate the query
        """
        with self._writing("eval_query") as backend:
            try:
                results = backend.eval_query(query)
            except Exception as e:
                raise EvalError(message=str(e), query=query) from e

        return first_value(results)

    # =========================================================================
    # Coverage
    # =========================================================================

    def enable_coverage(self, enable: bool = True) -> None:
        """Turn engine coverage tracking on or off."""
        with self._writing("enable_coverage") as backend:
            try:
                backend.set_enable_coverage(enable)
            except Exception as e:
                raise EngineError(message=str(e), operation="enable_coverage") from e

    def get_coverage_report(self) -> CoverageReport:
        """
        Coverage gathered by the engine.

        Raises:
            EngineError: If the engine cannot produce a report
        """
        with self._reading("get_coverage_report") as backend:
            try:
                raw = backend.get_coverage_report()
            except Exception as e:
                raise EngineError(message=str(e), operation="get_coverage_report") from e

        return CoverageReport.from_engine(raw)

    def clear_coverage(self) -> None:
        """Forget gathered coverage."""
        with self._writing("clear_coverage") as backend:
            try:
                backend.clear_coverage_data()
            except Exception as e:
                raise EngineError(message=str(e), operation="clear_coverage") from e

    def get_rule_coverage(self) -> dict[str, list[RuleCoverage]]:
        """
        Engine coverage mapped onto each policy's rules.

        Returns:
            Policy name to per-rule coverage in source order

        Raises:
            EngineError: If the engine cannot produce a report
        """
        # One lock hold so rule ranges and coverage lines describe the same source
        with self._reading("get_rule_coverage") as backend:
            policies = self.store.get_all()
            try:
                raw = backend.get_coverage_report()
            except Exception as e:
                raise EngineError(message=str(e), operation="get_rule_coverage") from e

        return map_rule_coverage(extract_all(policies), CoverageReport.from_engine(raw))

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def close(self) -> None:
        """Release the backend and forget stored policies."""
        with self._lock.write(self.lock_timeout):
            self.backend = None
            self.store.clear()

    def __enter__(self) -> "Engine":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit."""
        self.close()

    def __repr__(self) -> str:
        backend = self.backend.name if self.backend is not None else "closed"
        return f"<Engine: {backend}, {len(self.store)} policies>"


# =============================================================================
# Helpers
# =============================================================================


def first_value(results: dict[str, Any]) -> Any | Undefined:
    """First expression value of the first result, or UNDEFINED."""
    result_list = results.get("result") or []
    if not result_list:
        return UNDEFINED

    expressions = result_list[0].get("expressions") or []
    if not expressions:
        return UNDEFINED

    return expressions[0].get("value", UNDEFINED)


def resolve_patterns(base: Path, patterns: list[str]) -> list[Path]:
    """
    Resolve glob patterns (or plain paths) relative to a base directory.

    A glob that matches nothing is skipped; a plain path must exist.

    Returns:
        Matching files, sorted and de-duplicated, in pattern order

    Raises:
        ConfigFileMissingError: If a plain path does not name a file
    """
    found: list[Path] = []
    seen: set[Path] = set()
    for pattern in patterns:
        if any(c in pattern for c in "*?["):
            glob_base, relative = base, pattern
            if Path(pattern).is_absolute():
                # Path.glob() only takes relative patterns
                anchor = Path(Path(pattern).anchor)
                glob_base, relative = anchor, str(Path(pattern).relative_to(anchor))
            matches = sorted(p for p in glob_base.glob(relative) if p.is_file())
        else:
            candidate = base / pattern
            if not candidate.is_file():
                raise ConfigFileMissingError(path=str(candidate))
            matches = [candidate]
        for path in matches:
            if path not in seen:
                seen.add(path)
                found.append(path)
    return found


def _display_name(path: Path, base: Path) -> str:
    try:
        return path.relative_to(base).as_posix()
    except ValueError:
        return path.as_posix()


def _encode_json(value: Any, target: str) -> str:
    try:
        return json.dumps(value, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise JsonError(
            message=f"Cannot encode {target} as JSON: {e}",
            code=ERROR_JSON_ENCODE,
            target=target,
        ) from e


def _reject_constant(name: str) -> Any:
    # NaN, Infinity and -Infinity are not JSON
    raise ValueError(f"{name} is not valid JSON")


def _check_json(text: str, target: str) -> None:
    try:
        json.loads(text, parse_constant=_reject_constant)
    except ValueError as e:
        raise JsonError(message=f"Invalid JSON for {target}: {e}", target=target) from e
