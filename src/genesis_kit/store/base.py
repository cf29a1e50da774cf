"""
Abstract control-plane store interface.

Defines the Protocol that the publisher, synchronizer and compile step
depend on. Uses structural subtyping, so tests can pass any object with
matching methods.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .models import ConfigMap, ConfigMapList, Secret


class ControlPlaneStore(Protocol):
    """
    Protocol for a namespaced object store.

    Every method is scoped to the namespace the store was created for.

    Failure Signalling
    ------------------
    Methods raise `StoreStatusError` for any error status. Its predicates
    distinguish the cases callers react to:

    - `is_conflict`: create of an existing name
    - `is_retryable`: rate limited or temporarily unavailable
    - `is_expired`: continuation token no longer valid
    - `is_not_found`: read of a missing name

    Transport failures raise `StoreConnectionError`.
    """

    @property
    def namespace(self) -> str:
        """Namespace all calls operate in."""
        ...

    # -------------------------------------------------------------------------
    # Public objects
    # -------------------------------------------------------------------------

    async def create_config_map(self, config_map: ConfigMap) -> ConfigMap:
        """
        Create a ConfigMap if no object with its name exists.

        Returns:
            The object as stored.
        """
        ...

    async def list_config_maps(
        self,
        *,
        limit: int,
        continue_token: str | None = None,
    ) -> ConfigMapList:
        """
        List one page of ConfigMaps.

        Args:
            limit: Maximum items in the page.
            continue_token: Token from the previous page, or None to start.
        """
        ...

    async def read_config_map(self, name: str) -> ConfigMap | None:
        """
        Read one ConfigMap by name.

        Returns:
            The object, or None if it does not exist.
        """
        ...

    # -------------------------------------------------------------------------
    # Secret objects
    # -------------------------------------------------------------------------

    async def create_secret(self, secret: Secret) -> Secret:
        """Create a Secret if no object with its name exists."""
        ...

    async def list_secrets(self, *, limit: int) -> int:
        """
        List one bounded page of Secrets.

        Only used as a permission probe, so it returns the item count rather
        than the (sensitive) contents.
        """
        ...
