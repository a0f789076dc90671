"""
Serializer - PurchaserInfo back to the raw subscriber record shape.

Used to cache a snapshot between launches. Parsing the output yields a
PurchaserInfo equal to the one serialized.
"""

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from purchaser_info.models.domain import Expiration, ExpirationKind, PurchaserInfo
from purchaser_info.services.dates import format_date


def serialize_purchaser_info(info: PurchaserInfo) -> dict[str, Any]:
    """
    Rebuild the raw record for a snapshot.

    Args:
        info: Snapshot to serialize

    Returns:
        JSON-compatible dict; preserved unknown fields are fresh mutable copies
    """
    extras = info.extras

    subscriber: dict[str, Any] = thaw_json(extras.subscriber)
    if info.original_application_version is not None:
        subscriber["original_application_version"] = info.original_application_version

    subscriber["subscriptions"] = {
        product_id: _encode_entry(
            extras.subscriptions.get(product_id, {}),
            purchased_at,
            info.expirations_by_product.get(product_id, Expiration.never()),
        )
        for product_id, purchased_at in info.purchase_dates_by_product.items()
    }

    subscriber["non_subscriptions"] = {
        product_id: thaw_json(extras.non_subscriptions.get(product_id, ()))
        for product_id in sorted(info.non_consumable_purchases)
    }

    subscriber["entitlements"] = {
        entitlement_id: _encode_entry(
            extras.entitlements.get(entitlement_id, {}),
            purchased_at,
            info.expirations_by_entitlement.get(entitlement_id, Expiration.never()),
        )
        for entitlement_id, purchased_at in info.purchase_dates_by_entitlement.items()
    }

    record: dict[str, Any] = thaw_json(extras.record)
    if info.request_date is not None:
        record["request_date"] = format_date(info.request_date)
    record["subscriber"] = subscriber
    return record


def _encode_entry(
    extra: Mapping[str, Any], purchased_at: datetime, expiration: Expiration
) -> dict[str, Any]:
    entry: dict[str, Any] = thaw_json(extra)
    entry["purchase_date"] = format_date(purchased_at)
    entry["expires_date"] = _encode_expiration(expiration)
    return entry


def _encode_expiration(expiration: Expiration) -> Any:
    if expiration.kind is ExpirationKind.EXPIRES:
        if expiration.expires_at is None:
            raise ValueError("EXPIRES expiration without an instant")
        return format_date(expiration.expires_at)
    if expiration.kind is ExpirationKind.UNKNOWN:
        return thaw_json(expiration.raw)
    return None


def thaw_json(value: Any) -> Any:
    """Fresh, mutable JSON copy of a frozen value: mappings to dicts, tuples to lists."""
    if isinstance(value, Mapping):
        return {key: thaw_json(item) for key, item in value.items()}
    if isinstance(value, list | tuple):
        return [thaw_json(item) for item in value]
    return value
