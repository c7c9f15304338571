"""
Actions exempt from authentication for the current request cycle.
"""

from typing import Iterable, Iterator, Set
import logging


logger = logging.getLogger(__name__)


class PublicActionRegistry:
    """
    Mutable set of public action names, owned by one ApiComponent.

        registry = PublicActionRegistry(["edit", "view"])
        registry.deny("edit")      # True,  {"view"} remains
        registry.deny("missing")   # False, unchanged
    """

    def __init__(self, actions: Iterable[str] = ()):
        self._actions: Set[str] = set(actions)

    def seed(self, actions: Iterable[str]) -> bool:
        """
        Populate from a host-supplied list, only while empty.

        Returns:
            True if the registry was seeded, False if it already had entries.
        """
        if self._actions:
            return False
        self._actions.update(actions)
        return True

    def deny(self, action: str) -> bool:
        """
        Remove an action from the public set.

        Returns:
            True if it was present and removed, False if it was not public.
        """
        if action not in self._actions:
            return False
        self._actions.discard(action)
        logger.debug(f"Public access denied for action {action!r}")
        return True

    def is_public(self, action: str) -> bool:
        return action in self._actions

    def clear(self) -> None:
        self._actions.clear()

    def __contains__(self, action: object) -> bool:
        return action in self._actions

    def __iter__(self) -> Iterator[str]:
        return iter(self._actions)

    def __len__(self) -> int:
        return len(self._actions)

    def __repr__(self) -> str:
        return f"PublicActionRegistry({sorted(self._actions)!r})"
