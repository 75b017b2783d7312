"""Per-line request sequencing for overlapping cart mutations.

Rapid repeated mutations (e.g. quantity +/- clicks) are issued concurrently.
Each takes a monotonic ticket registered against every line it touches; a
response is applied only if its ticket is still the newest for each of those
lines and newer than the last snapshot applied. Anything else is stale.
"""

import itertools
from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True)
class Ticket:
    number: int
    line_keys: frozenset


class RequestSequencer:
    ALL_LINES = "*"

    def __init__(self):
        self._counter = itertools.count(1)
        self._latest: dict[str, int] = {}
        self._applied = 0

    @property
    def last_applied(self) -> int:
        return self._applied

    def issue(self, line_ids: Iterable | None = None) -> Ticket:
        """Take a ticket; ``None`` means the mutation touches the whole cart."""
        number = next(self._counter)
        keys = frozenset({self.ALL_LINES}) if line_ids is None else frozenset(str(i) for i in line_ids)
        for key in keys:
            self._latest[key] = number
        return Ticket(number=number, line_keys=keys)

    def is_current(self, ticket: Ticket) -> bool:
        if ticket.number <= self._applied:
            return False
        if self._latest.get(self.ALL_LINES, 0) > ticket.number:
            return False
        return all(self._latest.get(key, 0) <= ticket.number for key in ticket.line_keys)

    def accept(self, ticket: Ticket) -> bool:
        """Mark ``ticket`` applied if it is current; return whether it was."""
        if not self.is_current(ticket):
            return False
        self._applied = ticket.number
        return True
