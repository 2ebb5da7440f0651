"""
In-memory policy store.

Holds the last-registered source text for every policy name. The store is
the input to the rule scanner: rule inventories are always re-derived from
the text held here, so there is nothing to invalidate when a policy changes.

The store does no locking of its own. The owning Engine guards it with the
same reader/writer lock that guards the evaluation engine.
"""

from collections.abc import Iterator

from regoscope.utils.logging import get_logger

logger = get_logger(__name__)


class PolicyStore:
    """
    Mapping from policy name to raw source text.

    Usage:
        store = PolicyStore()
        store.put("authz.rego", source)
        snapshot = store.get_all()

    Attributes:
        _policies: Internal mapping of policy names to source text
    """

    def __init__(self) -> None:
        """Initialize an empty store."""
        self._policies: dict[str, str] = {}

    def put(self, name: str, source: str) -> None:
        """
        Insert or replace the source for a policy.

        No validation is done here; the evaluation engine decides whether
        the source parses.

        Args:
            name: Policy name
            source: Raw Rego source text
        """
        if name in self._policies:
            logger.debug("Replacing stored source for policy %s", name)
        self._policies[name] = source

    def get(self, name: str) -> str | None:
        """Source for a policy, or None if it was never registered."""
        return self._policies.get(name)

    def get_all(self) -> dict[str, str]:
        """
        Snapshot of every stored policy.

        Returns:
            A new dict; changing it does not change the store
        """
        return dict(self._policies)

    def names(self) -> list[str]:
        """Registered policy names, sorted."""
        return sorted(self._policies)

    def clear(self) -> None:
        """Forget every stored policy."""
        self._policies.clear()

    def __contains__(self, name: object) -> bool:
        return name in self._policies

    def __len__(self) -> int:
        return len(self._policies)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __repr__(self) -> str:
        return f"<PolicyStore: {len(self._policies)} policies>"
