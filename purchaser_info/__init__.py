"""
Purchaser info core - interprets raw subscriber records into an immutable
snapshot of purchases and entitlements.
"""

from purchaser_info.exceptions import MalformedDateError, MalformedRecordError, PurchaserInfoError
from purchaser_info.models.domain import Expiration, ExpirationKind, PurchaserInfo, RecordExtras
from purchaser_info.services.dates import format_date, normalize_date
from purchaser_info.services.parser import parse_purchaser_info
from purchaser_info.services.serializer import serialize_purchaser_info

__all__ = [
    "Expiration",
    "ExpirationKind",
    "MalformedDateError",
    "MalformedRecordError",
    "PurchaserInfo",
    "PurchaserInfoError",
    "RecordExtras",
    "format_date",
    "normalize_date",
    "parse_purchaser_info",
    "serialize_purchaser_info",
]
