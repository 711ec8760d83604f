"""
Pytest configuration and fixtures for Shipzone tests.
"""
import os
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

# Set test environment before importing app modules
os.environ["ENVIRONMENT"] = "development"
os.environ["SHIPPING_TIMEZONE"] = "UTC"
os.environ["SHIPPING_HOLIDAYS"] = ""
os.environ["SHIPPING_DISPATCH_CUTOFF"] = ""
os.environ["SHIPPING_REPOSITORY_TIMEOUT_SECONDS"] = "5"

from shipzone.modules.shipping import (  # noqa: E402
    ETACalculator,
    HolidayCalendar,
    InMemoryShippingRepository,
    ShippingMethod,
    ShippingRate,
    ShippingResolutionService,
    ShippingZone,
    ZoneResolver,
)

# Friday, January 5, 2024, noon UTC
FRIDAY_NOON = datetime(2024, 1, 5, 12, 0, tzinfo=timezone.utc)
# Monday, January 1, 2024, noon UTC
MONDAY_NOON = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def domestic_zone() -> ShippingZone:
    return ShippingZone(
        id="zone-1",
        name="Domestic",
        priority=1,
        pincode_ranges=("400001-400099",),
        excluded_pincodes=frozenset({"400050"}),
    )


@pytest.fixture
def metro_zone() -> ShippingZone:
    return ShippingZone(
        id="zone-2",
        name="Mumbai Metro",
        priority=2,
        pincode_patterns=(r"^400\d{3}$",),
    )


@pytest.fixture
def standard_method() -> ShippingMethod:
    return ShippingMethod(
        id="method-1",
        name="Standard Shipping",
        code="standard",
        base_rate=Decimal("5.99"),
        estimated_days=3,
        description="Standard shipping option",
    )


@pytest.fixture
def express_method() -> ShippingMethod:
    return ShippingMethod(
        id="method-2",
        name="Express Shipping",
        code="express",
        base_rate=Decimal("12.50"),
        estimated_days=1,
    )


@pytest.fixture
def disabled_method() -> ShippingMethod:
    return ShippingMethod(
        id="method-3",
        name="Overnight",
        code="overnight",
        base_rate=Decimal("25.00"),
        estimated_days=1,
        is_active=False,
    )


@pytest.fixture
def light_parcel_rate() -> ShippingRate:
    return ShippingRate(
        id="rate-1",
        name="Standard Rate",
        rate=Decimal("3.99"),
        shipping_method_id="method-1",
        shipping_zone_id="zone-1",
        min_weight=Decimal("0"),
        max_weight=Decimal("5"),
        min_order_value=Decimal("0"),
    )


@pytest.fixture
def repository(
    domestic_zone, metro_zone, standard_method, express_method, disabled_method, light_parcel_rate
) -> InMemoryShippingRepository:
    return InMemoryShippingRepository(
        zones=[domestic_zone, metro_zone],
        methods=[standard_method, express_method, disabled_method],
        rates=[light_parcel_rate],
    )


@pytest.fixture
def eta_calculator() -> ETACalculator:
    return ETACalculator(holidays=HolidayCalendar(), tz=timezone.utc)


@pytest.fixture
def shipping_service(repository, eta_calculator) -> ShippingResolutionService:
    return ShippingResolutionService(repository, eta_calculator=eta_calculator, timeout=1.0)


@pytest.fixture
def zone_resolver(repository) -> ZoneResolver:
    return ZoneResolver(repository)


@pytest.fixture
def mock_db() -> AsyncMock:
    """Create mock async database session."""
    db = AsyncMock()
    db.add = MagicMock()
    db.execute = AsyncMock()
    return db
