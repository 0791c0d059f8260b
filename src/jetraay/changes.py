"""
Change detection for the history write path.

A save only earns a history entry when a tracked field differs from the
stored record. Which fields are tracked, and how header lists compare, come
from HistoryConfig:

    field     tracked by default
    -------   ------------------
    name      never
    method    no
    url       no
    headers   yes (as a set, see HeaderMatch)
    body      yes (exact, None included)

Untracked fields are still written on every save; they just do not create
a new version.
"""

from jetraay.schema import HeaderMatch, HistoryConfig, Record


def headers_equal(
    stored: list[str],
    proposed: list[str],
    match: HeaderMatch = HeaderMatch.LEGACY,
) -> bool:
    """Compare header lists without regard to order."""
    if match is HeaderMatch.SET:
        return set(stored) == set(proposed)
    if len(stored) != len(proposed):
        return False
    proposed_set = set(proposed)
    return all(header in proposed_set for header in stored)


class ChangeDetector:
    """
    Decides whether a proposed record differs from its stored state.

    Usage:
        detector = ChangeDetector(HistoryConfig())
        if detector.has_changed(store.get(record.id), record):
            ledger.append(record)
    """

    def __init__(self, config: HistoryConfig | None = None) -> None:
        self.config = config or HistoryConfig()

    @property
    def tracked_fields(self) -> tuple[str, ...]:
        return self.config.tracked_fields

    def is_tracked(self, field_name: str) -> bool:
        """Whether a change to ``field_name`` is history-worthy."""
        return field_name in self.config.tracked_fields

    def changed_fields(self, stored: Record, proposed: Record) -> list[str]:
        """Tracked fields whose values differ."""
        changed = []
        for name in self.config.tracked_fields:
            if name == "headers":
                same = headers_equal(stored.headers, proposed.headers, self.config.header_match)
            else:
                same = getattr(stored, name) == getattr(proposed, name)
            if not same:
                changed.append(name)
        return changed

    def has_changed(self, stored: Record | None, proposed: Record) -> bool:
        """
        Whether saving ``proposed`` should append a history entry.

        A record with no stored state is always a change, so every record
        gets a version 1.
        """
        if stored is None:
            return True
        return bool(self.changed_fields(stored, proposed))
