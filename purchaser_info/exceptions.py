"""
Exception Classes - Strongly typed exception hierarchy.

NO DICTIONARIES - All exceptions have typed attributes.
"""


class PurchaserInfoError(Exception):
    """Base exception for all purchaser info errors."""

    pass


class MalformedDateError(PurchaserInfoError):
    """Raised when a single date field cannot be parsed.

    Field-level: the record parser recovers by treating the field as
    unusable and carries on with the rest of the record.
    """

    def __init__(self, value: object, reason: str) -> None:
        self.value = value
        self.reason = reason
        super().__init__(f"Malformed date {value!r}: {reason}")


class MalformedRecordError(PurchaserInfoError):
    """Raised when the raw record lacks the required container structure.

    Record-level: always surfaced to the caller.
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Malformed purchaser record: {reason}")
