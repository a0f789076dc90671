"""
Tests for exception classes.

Covers all exception types and their string representations.
"""

import pytest

from purchaser_info.exceptions import MalformedDateError, MalformedRecordError, PurchaserInfoError


class TestPurchaserInfoError:
    """Tests for base PurchaserInfoError."""

    def test_is_exception(self):
        """PurchaserInfoError is a subclass of Exception."""
        assert issubclass(PurchaserInfoError, Exception)

    def test_can_be_raised(self):
        """PurchaserInfoError can be raised and caught."""
        with pytest.raises(PurchaserInfoError):
            raise PurchaserInfoError("test error")


class TestMalformedDateError:
    """Tests for MalformedDateError."""

    def test_attributes(self):
        """Exception keeps the offending value and reason."""
        exc = MalformedDateError("next week", "Invalid isoformat string")
        assert exc.value == "next week"
        assert exc.reason == "Invalid isoformat string"

    def test_message_format(self):
        """Message includes the value and reason."""
        exc = MalformedDateError(12345, "expected ISO-8601 string, got int")
        assert "12345" in str(exc)
        assert "expected ISO-8601 string" in str(exc)

    def test_is_purchaser_info_error(self):
        """MalformedDateError is a PurchaserInfoError."""
        assert isinstance(MalformedDateError("x", "y"), PurchaserInfoError)


class TestMalformedRecordError:
    """Tests for MalformedRecordError."""

    def test_attributes(self):
        """Exception keeps the reason."""
        exc = MalformedRecordError("subscriber: Field required")
        assert exc.reason == "subscriber: Field required"

    def test_message_format(self):
        """Message names the record and the reason."""
        exc = MalformedRecordError("subscriber: Field required")
        assert str(exc) == "Malformed purchaser record: subscriber: Field required"

    def test_is_purchaser_info_error(self):
        """MalformedRecordError is a PurchaserInfoError."""
        assert isinstance(MalformedRecordError("x"), PurchaserInfoError)

    def test_distinct_from_date_error(self):
        """Record-level and field-level errors are separate types."""
        assert not issubclass(MalformedRecordError, MalformedDateError)
        assert not issubclass(MalformedDateError, MalformedRecordError)
