"""Streamer presence tracking.

Each streamer is either unknown or notified. A streamer moves to
notified on the first snapshot that contains them and back to unknown on
the first snapshot that does not. Identity is the exact display name.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from .models import StreamRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Reconciliation:
    """Outcome of comparing one snapshot with the notified set."""

    new: tuple[StreamRecord, ...]
    ended: tuple[str, ...]
    notified_after: frozenset[str]


def reconcile(notified: Iterable[str], streams: Iterable[StreamRecord]) -> Reconciliation:
    """Compare a snapshot against the currently notified names.

    Duplicate names collapse to one entry that keeps the position of the
    first occurrence and the data of the last.
    """
    notified = frozenset(notified)

    latest: dict[str, StreamRecord] = {}
    for stream in streams:
        latest[stream.user_display_name] = stream

    new = tuple(record for name, record in latest.items() if name not in notified)
    ended = tuple(sorted(notified - latest.keys()))
    return Reconciliation(new=new, ended=ended, notified_after=frozenset(latest))


class PresenceTracker:
    """Owns the set of streamers already announced for their current session."""

    def __init__(self, notified: Iterable[str] = ()) -> None:
        self._notified: set[str] = set(notified)

    @property
    def notified(self) -> frozenset[str]:
        return frozenset(self._notified)

    def __contains__(self, name: object) -> bool:
        return name in self._notified

    def __len__(self) -> int:
        return len(self._notified)

    def reconcile(self, streams: Iterable[StreamRecord]) -> Reconciliation:
        """Compute the transitions for a snapshot without changing state."""
        return reconcile(self._notified, streams)

    def apply(self, result: Reconciliation) -> None:
        """Commit a reconciliation as the new notified set."""
        for name in result.ended:
            logger.info(f"Removed {name} from cache, no longer streaming")
        self._notified = set(result.notified_after)

    def reset(self) -> None:
        self._notified.clear()
