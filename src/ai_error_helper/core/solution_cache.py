"""Fingerprint-keyed store of error records and their solution states.

The cache is the single owner of ErrorRecords. Only the DiagnosticWatcher
(on refresh) and the ExplanationCoordinator (on state transitions) write
to it; everything else reads snapshots handed to listeners on publish.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator

import structlog

from ai_error_helper.models.diagnostic import Fingerprint
from ai_error_helper.models.solution import (
    ErrorRecord,
    Failed,
    Pending,
    Ready,
    SolutionState,
    Unrequested,
)

log = structlog.get_logger()

CacheListener = Callable[[tuple[ErrorRecord, ...]], None]

# Allowed target state types for each source state type
_TRANSITIONS: dict[type, tuple[type, ...]] = {
    Unrequested: (Pending,),
    Pending: (Ready, Failed),
    Ready: (Pending,),
    Failed: (Pending,),
}


class InvalidTransitionError(Exception):
    """A solution state change that the state machine does not allow."""


class SolutionCache:
    """Insertion-ordered mapping of fingerprint to ErrorRecord.

    Insertion order follows the order diagnostics were reported in, which
    is also display order.

    Example:
        cache = SolutionCache()
        cache.add_listener(view.render)
        cache.replace(records)
        cache.publish()
    """

    def __init__(self) -> None:
        self._records: dict[Fingerprint, ErrorRecord] = {}
        self._listeners: list[CacheListener] = []

    def __contains__(self, fingerprint: object) -> bool:
        return fingerprint in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ErrorRecord]:
        return iter(self.records)

    @property
    def records(self) -> tuple[ErrorRecord, ...]:
        """Snapshot of all records in display order."""
        return tuple(self._records.values())

    def get(self, fingerprint: Fingerprint) -> ErrorRecord | None:
        """Return the record for a fingerprint, if it is still visible."""
        return self._records.get(fingerprint)

    def replace(self, records: Iterable[ErrorRecord]) -> None:
        """Replace the whole contents. The first record for a fingerprint wins."""
        new_records: dict[Fingerprint, ErrorRecord] = {}
        for record in records:
            new_records.setdefault(record.fingerprint, record)
        self._records = new_records

    def transition(self, fingerprint: Fingerprint, state: SolutionState) -> ErrorRecord | None:
        """Move a record to a new solution state.

        Args:
            fingerprint: Record to update
            state: Target state

        Returns:
            The updated record, or None if the fingerprint is gone.

        Raises:
            InvalidTransitionError: If the state machine forbids the change
        """
        record = self._records.get(fingerprint)
        if record is None:
            return None

        allowed = _TRANSITIONS[type(record.state)]
        if not isinstance(state, allowed):
            raise InvalidTransitionError(
                f"Cannot move {fingerprint} from {type(record.state).__name__} "
                f"to {type(state).__name__}"
            )

        updated = record.with_state(state)
        self._records[fingerprint] = updated
        return updated

    def add_listener(self, listener: CacheListener) -> Callable[[], None]:
        """Register a publish listener. Returns a function that removes it."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def publish(self) -> None:
        """Hand the current snapshot to every listener."""
        snapshot = self.records
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                log.exception("cache_listener_failed", error=str(e))
