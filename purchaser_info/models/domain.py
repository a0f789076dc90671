"""
Domain Models - Immutable purchaser state using dataclasses.

NO DICTIONARIES - All data structures are strongly typed immutable dataclasses.
Mapping fields are exposed through read-only proxies.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from types import MappingProxyType
from typing import Any


def _require_aware(value: datetime, name: str) -> datetime:
    """Reject naive instants and normalize aware ones to UTC."""
    if not isinstance(value, datetime):
        raise ValueError(f"{name} must be a datetime, got {type(value).__name__}")
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError(f"{name} must be timezone-aware: {value!r}")
    return value.astimezone(UTC)


def freeze_json(value: Any) -> Any:
    """Recursively turn JSON objects into read-only mappings and arrays into tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({key: freeze_json(item) for key, item in value.items()})
    if isinstance(value, list | tuple):
        return tuple(freeze_json(item) for item in value)
    return value


class ExpirationKind(str, Enum):
    """How a purchase ends."""

    EXPIRES = "expires"  # Concrete expiration instant
    NEVER = "never"  # Purchased, does not expire (wire null/absent)
    UNKNOWN = "unknown"  # Present upstream but unparsable


@dataclass(frozen=True)
class Expiration:
    """Tagged expiration value.

    Keeps "does not expire" apart from "could not be read": a NEVER entry is
    active indefinitely, an UNKNOWN entry is never considered active. The raw
    upstream value of an UNKNOWN entry is kept so it can be written back.
    """

    kind: ExpirationKind
    expires_at: datetime | None = None
    raw: Any = None

    def __post_init__(self) -> None:
        """Validate that the payload matches the kind."""
        if self.kind is ExpirationKind.EXPIRES:
            if self.expires_at is None:
                raise ValueError("EXPIRES requires expires_at")
            object.__setattr__(self, "expires_at", _require_aware(self.expires_at, "expires_at"))
        elif self.expires_at is not None:
            raise ValueError(f"{self.kind.value} expiration cannot carry expires_at")

        if self.kind is not ExpirationKind.UNKNOWN and self.raw is not None:
            raise ValueError("Only UNKNOWN expirations carry a raw value")
        object.__setattr__(self, "raw", freeze_json(self.raw))

    @classmethod
    def at(cls, expires_at: datetime) -> "Expiration":
        return cls(ExpirationKind.EXPIRES, expires_at=expires_at)

    @classmethod
    def never(cls) -> "Expiration":
        return cls(ExpirationKind.NEVER)

    @classmethod
    def unknown(cls, raw: Any) -> "Expiration":
        return cls(ExpirationKind.UNKNOWN, raw=raw)

    @property
    def date(self) -> datetime | None:
        """Concrete expiration instant, None for NEVER and UNKNOWN."""
        return self.expires_at

    def is_active_at(self, now: datetime) -> bool:
        """Check whether access is still open at `now` (half-open interval)."""
        if self.kind is ExpirationKind.NEVER:
            return True
        if self.kind is ExpirationKind.EXPIRES and self.expires_at is not None:
            return now < self.expires_at
        return False


@dataclass(frozen=True)
class RecordExtras:
    """Wire fields the parser does not interpret, kept verbatim for round-trips."""

    record: Mapping[str, Any] = field(default_factory=dict)
    subscriber: Mapping[str, Any] = field(default_factory=dict)
    subscriptions: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)
    entitlements: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)
    non_subscriptions: Mapping[str, tuple[Any, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Deep-freeze every preserved value."""
        for name in ("record", "subscriber", "subscriptions", "entitlements", "non_subscriptions"):
            object.__setattr__(self, name, freeze_json(getattr(self, name)))


@dataclass(frozen=True)
class PurchaserInfo:
    """Immutable snapshot of a customer's purchases and entitlements.

    A refreshed raw record always produces a new instance; callers swap the
    reference they hold instead of updating this one.

    Invariants checked on construction:
    - every expiration key has a recorded purchase date
    - non-consumable products are never tracked for expiration
    - every instant is timezone-aware (normalized to UTC)
    """

    purchase_dates_by_product: Mapping[str, datetime] = field(default_factory=dict)
    expirations_by_product: Mapping[str, Expiration] = field(default_factory=dict)
    purchase_dates_by_entitlement: Mapping[str, datetime] = field(default_factory=dict)
    expirations_by_entitlement: Mapping[str, Expiration] = field(default_factory=dict)
    non_consumable_purchases: frozenset[str] = frozenset()
    original_application_version: str | None = None
    request_date: datetime | None = None
    extras: RecordExtras = field(default_factory=RecordExtras)

    def __post_init__(self) -> None:
        """Freeze mappings and validate invariants."""
        for name in ("purchase_dates_by_product", "purchase_dates_by_entitlement"):
            dates = {
                key: _require_aware(value, f"{name}[{key!r}]")
                for key, value in getattr(self, name).items()
            }
            object.__setattr__(self, name, MappingProxyType(dates))

        for name in ("expirations_by_product", "expirations_by_entitlement"):
            expirations = dict(getattr(self, name))
            for key, value in expirations.items():
                if not isinstance(value, Expiration):
                    raise ValueError(f"{name}[{key!r}] must be an Expiration")
            object.__setattr__(self, name, MappingProxyType(expirations))

        object.__setattr__(self, "non_consumable_purchases", frozenset(self.non_consumable_purchases))

        if self.request_date is not None:
            object.__setattr__(self, "request_date", _require_aware(self.request_date, "request_date"))

        orphaned = set(self.expirations_by_product) - set(self.purchase_dates_by_product)
        if orphaned:
            raise ValueError(f"Products with expiration but no purchase date: {sorted(orphaned)}")

        orphaned = set(self.expirations_by_entitlement) - set(self.purchase_dates_by_entitlement)
        if orphaned:
            raise ValueError(f"Entitlements with expiration but no purchase date: {sorted(orphaned)}")

        overlap = self.non_consumable_purchases & set(self.expirations_by_product)
        if overlap:
            raise ValueError(f"Products both non-consumable and expiring: {sorted(overlap)}")

    # ========================================================================
    # Construction / serialization
    # ========================================================================

    @classmethod
    def from_json_object(cls, raw: Mapping[str, Any]) -> "PurchaserInfo":
        """Parse a raw subscriber record. Raises MalformedRecordError."""
        from purchaser_info.services.parser import parse_purchaser_info

        return parse_purchaser_info(raw)

    def to_json_object(self) -> dict[str, Any]:
        """Rebuild the raw record in its wire shape."""
        from purchaser_info.services.serializer import serialize_purchaser_info

        return serialize_purchaser_info(self)

    # ========================================================================
    # Date views
    # ========================================================================

    @property
    def expiration_dates_by_product(self) -> Mapping[str, datetime | None]:
        """Product → expiration instant; None when it never expires or is unreadable."""
        return MappingProxyType({k: v.date for k, v in self.expirations_by_product.items()})

    @property
    def expiration_date_by_entitlement(self) -> Mapping[str, datetime | None]:
        return MappingProxyType({k: v.date for k, v in self.expirations_by_entitlement.items()})

    @property
    def purchase_date_by_entitlement(self) -> Mapping[str, datetime]:
        return self.purchase_dates_by_entitlement

    def purchase_date_for_product(self, product_id: str) -> datetime | None:
        return self.purchase_dates_by_product.get(product_id)

    def expiration_date_for_product(self, product_id: str) -> datetime | None:
        expiration = self.expirations_by_product.get(product_id)
        return expiration.date if expiration else None

    def purchase_date_for_entitlement(self, entitlement_id: str) -> datetime | None:
        return self.purchase_dates_by_entitlement.get(entitlement_id)

    def expiration_date_for_entitlement(self, entitlement_id: str) -> datetime | None:
        expiration = self.expirations_by_entitlement.get(entitlement_id)
        return expiration.date if expiration else None

    @property
    def all_purchased_product_identifiers(self) -> frozenset[str]:
        """Every product ever purchased, subscriptions and one-time purchases."""
        return frozenset(self.purchase_dates_by_product) | self.non_consumable_purchases

    @property
    def latest_expiration_date(self) -> datetime | None:
        """Latest concrete expiration among subscription products."""
        dates = [d for d in self.expiration_dates_by_product.values() if d is not None]
        return max(dates) if dates else None

    # ========================================================================
    # Lifecycle queries
    # ========================================================================

    def is_active(self, entitlement_id: str, now: datetime | None = None) -> bool:
        """
        Check if an entitlement grants access at `now` (default: current time).

        Active means purchased at or before `now` and either non-expiring or
        expiring strictly after `now`. An expiration equal to `now` is expired.
        """
        return _entry_active(
            self.purchase_dates_by_entitlement,
            self.expirations_by_entitlement,
            entitlement_id,
            _evaluation_instant(now),
        )

    def is_product_active(self, product_id: str, now: datetime | None = None) -> bool:
        """Check if a product grants access at `now`; one-time purchases always do."""
        if product_id in self.non_consumable_purchases:
            return True
        return _entry_active(
            self.purchase_dates_by_product,
            self.expirations_by_product,
            product_id,
            _evaluation_instant(now),
        )

    def active_entitlements(self, now: datetime | None = None) -> frozenset[str]:
        instant = _evaluation_instant(now)
        return frozenset(
            key
            for key in self.purchase_dates_by_entitlement
            if _entry_active(
                self.purchase_dates_by_entitlement, self.expirations_by_entitlement, key, instant
            )
        )

    def active_subscriptions(self, now: datetime | None = None) -> frozenset[str]:
        """Subscription products active at `now`. One-time purchases are not included."""
        instant = _evaluation_instant(now)
        return frozenset(
            key
            for key in self.purchase_dates_by_product
            if _entry_active(self.purchase_dates_by_product, self.expirations_by_product, key, instant)
        )


def _evaluation_instant(now: datetime | None) -> datetime:
    if now is None:
        return datetime.now(UTC)
    return _require_aware(now, "now")


def _entry_active(
    purchase_dates: Mapping[str, datetime],
    expirations: Mapping[str, Expiration],
    key: str,
    now: datetime,
) -> bool:
    purchased_at = purchase_dates.get(key)
    if purchased_at is None or now < purchased_at:
        return False
    return expirations.get(key, Expiration.never()).is_active_at(now)
