"""
Artifact synchronizer.

Pages through the store's ConfigMaps, keeps those carrying one discovery
annotation value, and writes their data entries to a sink.

State Machine Diagram
---------------------
::

    LISTING --> PAGE_RECEIVED --> DONE
      ^  |            |
      |  |            +--> LISTING (next page)
      |  +--> RETRYING -------+
      |  +--> RESNAPSHOTTING -+
      +-----------------------+
    any non-terminal --> FAILED

Recovery
--------
- **Retryable status** (429, 5xx): wait `base_delay * 2**(attempt - 1)` and
  list again with the same cursor, at most `max_retries` times in a row.
- **Expired cursor** (410): forget the cursor and its history, wait
  `base_delay * attempt`, and restart the listing from the first page, at
  most `max_resnapshots` times in a row.
- Any successful list call resets both counters.

A store that hands out a continuation token twice within one listing is
broken; the run fails instead of looping.

Pages are processed strictly in order. Within one page, matched objects
are written concurrently.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Final, Protocol

from genesis_kit.store import ConfigMap, ConfigMapList, ControlPlaneStore
from genesis_kit.types import PaginationProtocolError, StoreError, StoreStatusError, SyncError

from .records import ANNOTATION_KEY, AnnotationValue

logger = logging.getLogger(__name__)

PAGE_SIZE: Final = 100
"""Objects requested per list call."""

MAX_PAGE_RETRY_ATTEMPTS: Final = 5
"""Consecutive retries of one page on a transient status."""

MAX_RESNAPSHOT_ATTEMPTS: Final = 3
"""Consecutive restarts after the cursor expired."""

RETRY_BASE_DELAY_SECONDS: Final = 0.1
"""Base unit for both backoff schedules."""


class SyncState(Enum):
    """Phase of one synchronization run."""

    LISTING = auto()
    """A list call with the current cursor is in flight."""

    PAGE_RECEIVED = auto()
    """Matched objects of the page are being written."""

    RETRYING = auto()
    """Backing off before listing the same page again."""

    RESNAPSHOTTING = auto()
    """Cursor expired; backing off before listing from the start."""

    DONE = auto()
    """The last page has been processed."""

    FAILED = auto()
    """The run was aborted."""

    def can_transition_to(self, target: SyncState) -> bool:
        """Check whether the state machine allows moving to `target`."""
        return target in _VALID_TRANSITIONS.get(self, set())

    @property
    def is_terminal(self) -> bool:
        """Whether the run has finished."""
        return self in {SyncState.DONE, SyncState.FAILED}


_VALID_TRANSITIONS: dict[SyncState, set[SyncState]] = {
    SyncState.LISTING: {
        SyncState.PAGE_RECEIVED,
        SyncState.RETRYING,
        SyncState.RESNAPSHOTTING,
        SyncState.FAILED,
    },
    SyncState.PAGE_RECEIVED: {SyncState.LISTING, SyncState.DONE, SyncState.FAILED},
    SyncState.RETRYING: {SyncState.LISTING, SyncState.FAILED},
    SyncState.RESNAPSHOTTING: {SyncState.LISTING, SyncState.FAILED},
}
"""Valid state transitions for the synchronizer."""


@dataclass(slots=True)
class PaginationCursor:
    """Continuation token plus every token issued during the current listing."""

    token: str | None = None
    seen: set[str] = field(default_factory=set)

    def advance(self, next_token: str) -> None:
        """
        Move to the next page.

        Raises:
            PaginationProtocolError: If the token was already issued.
        """
        if next_token in self.seen:
            raise PaginationProtocolError(next_token)
        self.seen.add(next_token)
        self.token = next_token

    def reset(self) -> None:
        """Start over from the first page."""
        self.token = None
        self.seen.clear()


@dataclass(slots=True)
class SyncTotals:
    """Counters returned by a finished run."""

    objects: int = 0
    """Objects that carried the expected annotation."""

    entries: int = 0
    """Data entries written to the sink."""


class ArtifactSink(Protocol):
    """Destination for synchronized data entries."""

    async def write(self, object_name: str, key: str, value: str) -> None:
        """Persist one data entry of one object."""
        ...


def safe_file_name(key: str) -> str:
    """Replace path separators so a data key cannot escape its directory."""
    return key.replace("/", "_").replace("\\", "_")


class DirectorySink:
    """Writes each entry to `<root>/<object name>/<data key>`."""

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)

    def path_for(self, object_name: str, key: str) -> Path:
        """Target path of one entry."""
        return self.root / object_name / safe_file_name(key)

    async def write(self, object_name: str, key: str, value: str) -> None:
        path = self.path_for(object_name, key)
        await asyncio.to_thread(_write_text, path, value)
        logger.info("Wrote %s from %s to %s", path.name, object_name, path.parent)


def _write_text(path: Path, value: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(value, encoding="utf-8")


class ArtifactSynchronizer:
    """
    Copies annotated ConfigMaps from a store into a sink.

    Args:
        store: Store to list from.
        sink: Where data entries are written.
        annotation: Discovery value to match.
        page_size: Objects per list call.
        max_retries: Consecutive transient-status retries before failing.
        max_resnapshots: Consecutive cursor expirations before failing.
        base_delay: Backoff unit in seconds.
        sleep: Awaitable delay, replaceable in tests.
    """

    def __init__(
        self,
        store: ControlPlaneStore,
        sink: ArtifactSink,
        *,
        annotation: AnnotationValue = AnnotationValue.ABI,
        page_size: int = PAGE_SIZE,
        max_retries: int = MAX_PAGE_RETRY_ATTEMPTS,
        max_resnapshots: int = MAX_RESNAPSHOT_ATTEMPTS,
        base_delay: float = RETRY_BASE_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._store = store
        self._sink = sink
        self.annotation = annotation
        self.page_size = page_size
        self.max_retries = max_retries
        self.max_resnapshots = max_resnapshots
        self.base_delay = base_delay
        self._sleep = sleep
        self.state = SyncState.LISTING

    @property
    def _label(self) -> str:
        return f"{self.annotation.value.upper()} ConfigMaps"

    def _transition(self, target: SyncState) -> None:
        if not self.state.can_transition_to(target):
            raise RuntimeError(f"Invalid sync transition {self.state.name} -> {target.name}")
        self.state = target

    async def run(self) -> SyncTotals:
        """
        List every page and write matching entries.

        Returns:
            Totals. Zero matches is a normal result.

        Raises:
            SyncError: On a non-retryable status, an exhausted retry or
                resnapshot budget, a repeated continuation token, or a
                failed sink write.
        """
        self.state = SyncState.LISTING
        try:
            return await self._run()
        except SyncError:
            self.state = SyncState.FAILED
            raise

    async def _run(self) -> SyncTotals:
        cursor = PaginationCursor()
        totals = SyncTotals()
        retries = 0
        resnapshots = 0

        while True:
            try:
                page = await self._store.list_config_maps(
                    limit=self.page_size, continue_token=cursor.token
                )
            except StoreStatusError as e:
                if e.is_expired:
                    resnapshots += 1
                    if resnapshots > self.max_resnapshots:
                        raise SyncError(
                            f"Failed to download {self._label} after repeated "
                            "resource snapshot expirations."
                        ) from e
                    self._transition(SyncState.RESNAPSHOTTING)
                    logger.warning(
                        "Continuation token expired, restarting listing (%d/%d)",
                        resnapshots,
                        self.max_resnapshots,
                    )
                    cursor.reset()
                    await self._sleep(self.base_delay * resnapshots)
                    self._transition(SyncState.LISTING)
                    continue

                if e.is_retryable and retries < self.max_retries:
                    retries += 1
                    self._transition(SyncState.RETRYING)
                    delay = self.base_delay * 2 ** (retries - 1)
                    logger.warning(
                        "List returned HTTP %d, retrying in %.2fs (%d/%d)",
                        e.status_code,
                        delay,
                        retries,
                        self.max_retries,
                    )
                    await self._sleep(delay)
                    self._transition(SyncState.LISTING)
                    continue

                raise SyncError(f"Failed to list {self._label}: {e}") from e
            except StoreError as e:
                raise SyncError(f"Failed to list {self._label}: {e}") from e

            retries = 0
            resnapshots = 0
            self._transition(SyncState.PAGE_RECEIVED)
            await self._receive(page, totals)

            next_token = page.next_token
            if next_token is None:
                self._transition(SyncState.DONE)
                return totals

            cursor.advance(next_token)
            self._transition(SyncState.LISTING)

    async def _receive(self, page: ConfigMapList, totals: SyncTotals) -> None:
        matched = [
            item for item in page.items if item.annotation(ANNOTATION_KEY) == self.annotation.value
        ]
        written = await asyncio.gather(*(self._write_object(item) for item in matched))
        totals.objects += len(matched)
        totals.entries += sum(written)

    async def _write_object(self, config_map: ConfigMap) -> int:
        name = config_map.name
        if not name or not config_map.data:
            return 0
        entries = list(config_map.data.items())
        try:
            await asyncio.gather(*(self._sink.write(name, key, value) for key, value in entries))
        except OSError as e:
            raise SyncError(f"Failed to write ConfigMap {name}: {e}") from e
        return len(entries)
