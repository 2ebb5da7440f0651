"""
Base class for evaluation engine backends.

A backend is the thin adapter between regoscope and an external Rego
evaluation engine. regoscope never parses or evaluates Rego itself; every
operation below is delegated as-is.

Design Principles:
    - Backends raise whatever their engine raises; the Engine facade maps
      failures to regoscope's error categories
    - Backends are not thread-safe; the Engine facade serializes access
    - JSON crosses the boundary as text, so every engine sees the same bytes
"""

from abc import ABC, abstractmethod
from typing import Any


class Backend(ABC):
    """
    Abstract base class for evaluation engine backends.

    Subclasses must implement every engine operation. Example:

        class RecordingBackend(Backend):
            @property
            def name(self) -> str:
                return "recording"

            def add_policy(self, path: str, source: str) -> str:
                self.sources[path] = source
                return "data.example"
            ...
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Identifier of the engine behind this backend."""
        ...

    @abstractmethod
    def add_policy(self, path: str, source: str) -> str:
        """
        Parse and load a policy.

        Args:
            path: Name the policy is registered under (reported back in coverage)
            source: Raw Rego source

        Returns:
            The policy's package path (e.g. "data.authz")
        """
        ...

    @abstractmethod
    def set_input_json(self, text: str) -> None:
        """Replace the input document with a JSON document."""
        ...

    @abstractmethod
    def add_data_json(self, text: str) -> None:
        """Merge a JSON document into the data document."""
        ...

    @abstractmethod
    def eval_query(self, query: str) -> dict[str, Any]:
        """
        Evaluate a query.

        Returns:
            The engine's result document:
            ``{"result": [{"expressions": [{"value": ...}, ...]}, ...]}``
        """
        ...

    @abstractmethod
    def get_packages(self) -> list[str]:
        """Package paths of every loaded policy."""
        ...

    @abstractmethod
    def clear_data(self) -> None:
        """Drop the data document, keeping policies."""
        ...

    @abstractmethod
    def set_enable_coverage(self, enable: bool) -> None:
        """Turn coverage tracking on or off."""
        ...

    @abstractmethod
    def get_coverage_report(self) -> dict[str, Any]:
        """
        Coverage gathered so far.

        Returns:
            ``{"files": [{"path": ..., "covered": [...], "not_covered": [...]}]}``
        """
        ...

    @abstractmethod
    def clear_coverage_data(self) -> None:
        """Forget gathered coverage."""
        ...

    def __repr__(self) -> str:
        """String representation of the backend."""
        return f"<Backend: {self.name}>"
