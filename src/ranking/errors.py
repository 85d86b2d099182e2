from __future__ import annotations


class InvalidInputError(ValueError):
    """A list item or deal violates the ranker's input preconditions."""

    def __init__(self, kind: str, record_id: str, reason: str):
        self.kind = kind
        self.record_id = record_id
        self.reason = reason
        super().__init__(f"invalid {kind} {record_id!r}: {reason}")
