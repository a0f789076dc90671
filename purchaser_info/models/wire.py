"""
Wire Models - Pydantic models describing the raw subscriber record.

Only the container shape is validated here. Date fields are typed as Any so
the record parser can recover from a single bad value without rejecting the
whole record. Unknown keys are allowed and surface through `model_extra`.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict


class PurchaseEntry(BaseModel):
    """One entry under `subscriptions` or `entitlements`."""

    model_config = ConfigDict(extra="allow")

    purchase_date: Any = None
    expires_date: Any = None


class SubscriberRecord(BaseModel):
    """The `subscriber` object of the raw record."""

    model_config = ConfigDict(extra="allow")

    original_application_version: Any = None
    subscriptions: dict[str, Any] | None = None
    non_subscriptions: dict[str, Any] | None = None
    entitlements: dict[str, Any] | None = None


class RawRecord(BaseModel):
    """Top level of the raw record as returned by the subscriber endpoint."""

    model_config = ConfigDict(extra="allow")

    subscriber: SubscriberRecord
    request_date: Any = None
