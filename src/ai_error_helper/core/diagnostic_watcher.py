"""Recomputes the visible error set from the editor's diagnostics.

Solutions live exactly as long as their diagnostic is visible: when a
fingerprint disappears from the active document, its record and any
explanation are discarded, even if the same error reappears a keystroke
later.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import structlog

from ai_error_helper.core.fingerprinting import fingerprint
from ai_error_helper.core.solution_cache import SolutionCache
from ai_error_helper.interfaces.editor import DiagnosticsSource, TextDocument
from ai_error_helper.models.diagnostic import Diagnostic, Fingerprint, Severity
from ai_error_helper.models.solution import UNREQUESTED, ErrorRecord, has_solution

log = structlog.get_logger()


def refresh(
    document: TextDocument | None,
    raw_diagnostics: Iterable[Diagnostic],
    existing: Iterable[ErrorRecord],
) -> list[ErrorRecord]:
    """Merge fresh diagnostics against the previous records.

    Args:
        document: Active document, or None when no editor is focused
        raw_diagnostics: Every diagnostic reported for the document
        existing: Records from the previous refresh

    Returns:
        New records in report order. Error-severity diagnostics only; a
        record keeps its previous solution state when its fingerprint
        survived, otherwise it starts Unrequested.
    """
    if document is None:
        return []

    carried = {
        record.fingerprint: record.state for record in existing if has_solution(record.state)
    }

    records: list[ErrorRecord] = []
    seen: set[Fingerprint] = set()
    for diagnostic in raw_diagnostics:
        if diagnostic.severity != Severity.ERROR:
            continue
        fp = fingerprint(diagnostic)
        if fp in seen:
            continue
        seen.add(fp)
        records.append(
            ErrorRecord(
                fingerprint=fp,
                diagnostic=diagnostic,
                document=document,
                state=carried.get(fp, UNREQUESTED),
            )
        )
    return records


class DiagnosticWatcher:
    """Keeps the SolutionCache in step with the active document's errors.

    Call ``update()`` whenever diagnostics change or the active editor
    switches.
    """

    def __init__(self, source: DiagnosticsSource, cache: SolutionCache) -> None:
        self._source = source
        self._cache = cache

    def update(self) -> tuple[ErrorRecord, ...]:
        """Recompute, store and publish the current error set."""
        document = self._source.active_document()
        raw: Sequence[Diagnostic] = (
            self._source.diagnostics_for(document) if document is not None else ()
        )

        previous = self._cache.records
        records = refresh(document, raw, previous)

        dropped = {r.fingerprint for r in previous} - {r.fingerprint for r in records}
        if dropped:
            log.debug(
                "error_records_dropped",
                count=len(dropped),
                with_solution=sum(
                    1 for r in previous if r.fingerprint in dropped and has_solution(r.state)
                ),
            )

        self._cache.replace(records)
        self._cache.publish()

        log.debug(
            "diagnostics_refreshed",
            document=document.uri if document is not None else None,
            errors=len(records),
        )
        return self._cache.records
