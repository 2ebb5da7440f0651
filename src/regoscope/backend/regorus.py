"""
Backend for the regorus Rego engine.

Wraps ``regorus.Engine`` from the regorus Python bindings. The bindings are
imported when a backend is created, so the rest of regoscope (the scanner,
reports, ``regoscope rules``) works on machines without the native engine.
"""

import json
from typing import Any

from regoscope.backend.base import Backend
from regoscope.errors import BackendUnavailableError
from regoscope.utils.logging import get_logger

logger = get_logger(__name__)

BACKEND_PACKAGE = "regorus"


class RegorusBackend(Backend):
    """
    Backend delegating to a regorus engine instance.

    Attributes:
        _engine: The underlying ``regorus.Engine``
    """

    def __init__(self) -> None:
        """
        Create a fresh regorus engine.

        Raises:
            BackendUnavailableError: If the regorus bindings are not installed
        """
        try:
            import regorus
        except ImportError as e:
            raise BackendUnavailableError(backend=BACKEND_PACKAGE) from e

        self._engine = regorus.Engine()
        logger.debug("Created regorus engine")

    @property
    def name(self) -> str:
        return BACKEND_PACKAGE

    def add_policy(self, path: str, source: str) -> str:
        return self._engine.add_policy(path, source)

    def set_input_json(self, text: str) -> None:
        self._engine.set_input_json(text)

    def add_data_json(self, text: str) -> None:
        self._engine.add_data_json(text)

    def eval_query(self, query: str) -> dict[str, Any]:
        return self._engine.eval_query(query)

    def get_packages(self) -> list[str]:
        return list(self._engine.get_packages())

    def clear_data(self) -> None:
        self._engine.clear_data()

    def set_enable_coverage(self, enable: bool) -> None:
        self._engine.set_enable_coverage(enable)

    def get_coverage_report(self) -> dict[str, Any]:
        # The bindings hand the report over as a JSON string
        return json.loads(self._engine.get_coverage_report_as_json())

    def clear_coverage_data(self) -> None:
        self._engine.clear_coverage_data()
