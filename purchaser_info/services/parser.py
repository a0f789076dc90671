"""
Record Parser - raw subscriber record to PurchaserInfo.

NO DICTIONARIES leave this module - the result is a typed, immutable snapshot.

Field-level problems (one bad date, one malformed entry) are logged, counted
and recovered locally so a single corrupt value never hides the customer's
other entitlements. Record-level problems raise MalformedRecordError.
"""

from collections.abc import Mapping
from datetime import datetime
from typing import Any, NoReturn

from pydantic import ValidationError
from structlog import get_logger

from purchaser_info.exceptions import MalformedDateError, MalformedRecordError
from purchaser_info.models.domain import Expiration, PurchaserInfo, RecordExtras
from purchaser_info.models.wire import PurchaseEntry, RawRecord
from purchaser_info.observability.metrics import metrics
from purchaser_info.services.dates import normalize_date

logger = get_logger(__name__)

SUBSCRIPTIONS = "subscriptions"
NON_SUBSCRIPTIONS = "non_subscriptions"
ENTITLEMENTS = "entitlements"


class _ParsedContainer:
    """Purchase dates, expirations and leftover fields of one container."""

    def __init__(self) -> None:
        self.purchase_dates: dict[str, datetime] = {}
        self.expirations: dict[str, Expiration] = {}
        self.extras: dict[str, dict[str, Any]] = {}


def parse_purchaser_info(raw: Mapping[str, Any]) -> PurchaserInfo:
    """
    Parse a raw subscriber record.

    Args:
        raw: Decoded JSON record with a top-level `subscriber` object

    Returns:
        Immutable PurchaserInfo snapshot

    Raises:
        MalformedRecordError: If the container structure is missing or of the
            wrong type, or a product is listed both as a subscription and as
            a non-subscription purchase
    """
    try:
        record = RawRecord.model_validate(raw)
    except ValidationError as e:
        _reject(_describe_validation_error(e), e)

    subscriber = record.subscriber
    if subscriber.subscriptions is None and subscriber.entitlements is None:
        _reject("subscriber has neither subscriptions nor entitlements")

    subscriptions = subscriber.subscriptions or {}
    non_subscriptions = subscriber.non_subscriptions or {}
    entitlements = subscriber.entitlements or {}

    overlap = sorted(set(subscriptions) & set(non_subscriptions))
    if overlap:
        _reject(f"products listed as both subscription and non-subscription: {', '.join(overlap)}")

    products = _parse_container(SUBSCRIPTIONS, subscriptions)
    grants = _parse_container(ENTITLEMENTS, entitlements)
    transactions = _parse_non_subscriptions(non_subscriptions)

    info = PurchaserInfo(
        purchase_dates_by_product=products.purchase_dates,
        expirations_by_product=products.expirations,
        purchase_dates_by_entitlement=grants.purchase_dates,
        expirations_by_entitlement=grants.expirations,
        non_consumable_purchases=frozenset(transactions),
        original_application_version=_parse_app_version(subscriber.original_application_version),
        request_date=_parse_optional_date("record", "request_date", record.request_date),
        extras=RecordExtras(
            record=record.model_extra or {},
            subscriber=subscriber.model_extra or {},
            subscriptions=products.extras,
            entitlements=grants.extras,
            non_subscriptions=transactions,
        ),
    )

    metrics.record_parse("ok")
    logger.debug(
        "purchaser_info_parsed",
        subscriptions=len(info.purchase_dates_by_product),
        non_subscriptions=len(info.non_consumable_purchases),
        entitlements=len(info.purchase_dates_by_entitlement),
    )
    return info


def _reject(reason: str, cause: Exception | None = None) -> NoReturn:
    metrics.record_parse("malformed_record")
    logger.warning("malformed_purchaser_record", reason=reason)
    raise MalformedRecordError(reason) from cause


def _describe_validation_error(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"]) or "record"
    return f"{location}: {first['msg']}"


def _parse_container(container: str, entries: Mapping[str, Any]) -> _ParsedContainer:
    """Parse `subscriptions` or `entitlements` into dates and expirations."""
    parsed = _ParsedContainer()

    for identifier, value in entries.items():
        try:
            entry = PurchaseEntry.model_validate(value)
        except ValidationError:
            _drop(container, identifier, "entry is not an object")
            continue

        try:
            purchased_at = normalize_date(entry.purchase_date)
        except MalformedDateError as e:
            _malformed_date(container, identifier, "purchase_date", e)
            purchased_at = None

        if purchased_at is None:
            _drop(container, identifier, "missing purchase_date")
            continue

        parsed.purchase_dates[identifier] = purchased_at
        parsed.expirations[identifier] = _parse_expiration(container, identifier, entry.expires_date)
        parsed.extras[identifier] = entry.model_extra or {}

    return parsed


def _parse_expiration(container: str, identifier: str, raw: Any) -> Expiration:
    try:
        expires_at = normalize_date(raw)
    except MalformedDateError as e:
        _malformed_date(container, identifier, "expires_date", e)
        return Expiration.unknown(raw)

    if expires_at is None:
        return Expiration.never()
    return Expiration.at(expires_at)


def _parse_non_subscriptions(entries: Mapping[str, Any]) -> dict[str, list[Any]]:
    """One-time purchases: product id → transaction list, kept verbatim."""
    transactions: dict[str, list[Any]] = {}
    for product_id, value in entries.items():
        if not isinstance(value, list):
            _drop(NON_SUBSCRIPTIONS, product_id, "transactions are not a list")
            continue
        transactions[product_id] = value
    return transactions


def _parse_app_version(raw: Any) -> str | None:
    if raw is None or isinstance(raw, str):
        return raw
    metrics.record_malformed_field("subscriber", "original_application_version")
    logger.warning(
        "malformed_string_field",
        field="original_application_version",
        value_type=type(raw).__name__,
    )
    return None


def _parse_optional_date(container: str, field: str, raw: Any) -> datetime | None:
    try:
        return normalize_date(raw)
    except MalformedDateError as e:
        _malformed_date(container, None, field, e)
        return None


def _malformed_date(
    container: str, identifier: str | None, field: str, error: MalformedDateError
) -> None:
    metrics.record_malformed_field(container, field)
    logger.warning(
        "malformed_date_field",
        container=container,
        identifier=identifier,
        field=field,
        reason=error.reason,
    )


def _drop(container: str, identifier: str, reason: str) -> None:
    metrics.record_dropped_entry(container)
    logger.warning(
        "purchase_entry_dropped",
        container=container,
        identifier=identifier,
        reason=reason,
    )
