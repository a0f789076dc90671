"""
Pytest Configuration and Centralized Fixtures.

Provides reusable raw subscriber records and parsed snapshots:
- A full record with subscriptions, one-time purchases and entitlements
- A single-entitlement record for lifecycle scenarios
"""

import pytest

from purchaser_info import PurchaserInfo, parse_purchaser_info
from tests.factories import entry, record

# ============================================================================
# Record fixtures
# ============================================================================


@pytest.fixture
def raw_record() -> dict:
    """A realistic subscriber record with every container populated."""
    return {
        "request_date": "2024-01-15T10:30:00Z",
        "request_date_ms": 1705314600000,
        "subscriber": {
            "original_app_user_id": "$RCAnonymousID:abc123",
            "original_application_version": "1.0",
            "first_seen": "2023-12-20T08:00:00Z",
            "other_purchases": {},
            "subscriptions": {
                "monthly_cats": {
                    "purchase_date": "2024-01-01T00:00:00Z",
                    "expires_date": "2024-02-01T00:00:00Z",
                    "original_purchase_date": "2023-12-01T00:00:00Z",
                    "period_type": "normal",
                    "store": "app_store",
                    "is_sandbox": False,
                    "unsubscribe_detected_at": None,
                },
                "annual_cats": {
                    "purchase_date": "2022-06-01T00:00:00Z",
                    "expires_date": "2023-06-01T00:00:00Z",
                    "store": "app_store",
                },
                "grandfathered": {
                    "purchase_date": "2020-03-03T12:00:00.000Z",
                    "expires_date": None,
                },
            },
            "non_subscriptions": {
                "lifetime_cats": [
                    {
                        "id": "cadba0c81b",
                        "purchase_date": "2023-05-05T05:05:05Z",
                        "store": "app_store",
                        "is_sandbox": False,
                    }
                ]
            },
            "entitlements": {
                "pro_cat": {
                    "purchase_date": "2024-01-01T00:00:00Z",
                    "expires_date": "2024-02-01T00:00:00Z",
                    "product_identifier": "monthly_cats",
                },
                "old_pro": {
                    "purchase_date": "2022-06-01T00:00:00Z",
                    "expires_date": "2023-06-01T00:00:00Z",
                    "product_identifier": "annual_cats",
                },
                "forever": {
                    "purchase_date": "2020-03-03T12:00:00Z",
                    "expires_date": None,
                    "product_identifier": "lifetime_cats",
                },
            },
        },
    }


@pytest.fixture
def purchaser_info(raw_record: dict) -> PurchaserInfo:
    """Parsed snapshot of `raw_record`."""
    return parse_purchaser_info(raw_record)


@pytest.fixture
def pro_record() -> dict:
    """Single entitlement 'pro' for January 2024."""
    return record(
        entitlements={
            "pro": entry("2024-01-01T00:00:00Z", "2024-02-01T00:00:00Z"),
        }
    )
