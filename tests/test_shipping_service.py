"""
Tests for ShippingResolutionService.
"""
import asyncio
import dataclasses
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from shipzone.core.exceptions import (
    InvalidPincodeFormat,
    MethodInactive,
    MethodNotFound,
    NoServiceableZone,
    RepositoryUnavailable,
)
from shipzone.modules.shipping import (
    InMemoryShippingRepository,
    ResolutionContext,
    ShippingRate,
    ShippingResolutionService,
)
from tests.conftest import FRIDAY_NOON, MONDAY_NOON


def shipment(weight=None, order_value=None, **overrides) -> ResolutionContext:
    fields = dict(
        weight=Decimal(weight) if weight is not None else None,
        order_value=Decimal(order_value) if order_value is not None else None,
        as_of=MONDAY_NOON,
    )
    fields.update(overrides)
    return ResolutionContext(**fields)


class TestListMethods:

    @pytest.mark.asyncio
    async def test_fastest_first_and_inactive_hidden(self, shipping_service):
        """Test methods are ordered by transit days and inactive ones hidden."""
        methods = await shipping_service.list_methods()

        assert [m.code for m in methods] == ["express", "standard"]

    @pytest.mark.asyncio
    async def test_ties_on_days_order_by_name(self, standard_method, express_method):
        """Test equal transit days order by name."""
        slow_express = dataclasses.replace(express_method, estimated_days=3, name="Air Freight")
        service = ShippingResolutionService(
            InMemoryShippingRepository(methods=[standard_method, slow_express])
        )

        methods = await service.list_methods()

        assert [m.name for m in methods] == ["Air Freight", "Standard Shipping"]


class TestListAvailableMethods:

    @pytest.mark.asyncio
    async def test_light_parcel_uses_zone_rate(self, shipping_service):
        """2kg to 400010: the zone-1 rate beats the standard base rate."""
        quotes = await shipping_service.list_available_methods("400010", shipment("2", "20"))
        by_code = {q.method.code: q for q in quotes}

        assert by_code["standard"].price == Decimal("3.99")
        assert by_code["standard"].rate.id == "rate-1"
        assert by_code["standard"].uses_base_rate is False
        assert by_code["express"].price == Decimal("12.50")
        assert by_code["express"].uses_base_rate is True

    @pytest.mark.asyncio
    async def test_heavy_parcel_falls_back_to_base_rate(self, shipping_service):
        """10kg is outside the 0-5kg band, so the method is still offered at base rate."""
        quotes = await shipping_service.list_available_methods("400010", shipment("10"))
        by_code = {q.method.code: q for q in quotes}

        assert by_code["standard"].price == Decimal("5.99")
        assert by_code["standard"].rate is None

    @pytest.mark.asyncio
    async def test_quotes_follow_method_order(self, shipping_service):
        """Test quotes keep method order."""
        quotes = await shipping_service.list_available_methods("400010", shipment("2"))

        assert [q.method.code for q in quotes] == ["express", "standard"]
        assert "overnight" not in [q.method.code for q in quotes]

    @pytest.mark.asyncio
    async def test_unserviceable_pincode_is_empty(self, shipping_service):
        """Test unserviced pincode lists nothing."""
        assert await shipping_service.list_available_methods("999999", shipment("2")) == []

    @pytest.mark.asyncio
    async def test_eta_attached_to_each_quote(self, shipping_service):
        """Test each quote carries its delivery date."""
        quotes = await shipping_service.list_available_methods("400010", shipment(as_of=FRIDAY_NOON))
        by_code = {q.method.code: q for q in quotes}

        assert by_code["standard"].eta.days == 3
        assert by_code["standard"].eta.estimated_delivery_date == date(2024, 1, 10)
        assert by_code["express"].eta.estimated_delivery_date == date(2024, 1, 8)

    @pytest.mark.asyncio
    async def test_context_optional(self, shipping_service):
        """Test listing without a shipment context."""
        quotes = await shipping_service.list_available_methods("400010")
        assert len(quotes) == 2

    @pytest.mark.asyncio
    async def test_pincode_is_trimmed(self, shipping_service):
        """Test pincode whitespace is trimmed."""
        quotes = await shipping_service.list_available_methods("  400010 ", shipment("2"))
        assert len(quotes) == 2

    @pytest.mark.asyncio
    async def test_malformed_pincode_rejected(self, shipping_service):
        """Test malformed pincode raises InvalidPincodeFormat."""
        with pytest.raises(InvalidPincodeFormat):
            await shipping_service.list_available_methods("!!", shipment())


class TestCalculateShipping:

    @pytest.mark.asyncio
    async def test_rate_price_and_zone(self, shipping_service):
        """Test calculation uses the winning rate and its zone."""
        calculation = await shipping_service.calculate_shipping(
            "method-1", "400010", shipment("2", as_of=FRIDAY_NOON)
        )

        assert calculation.base_rate == Decimal("3.99")
        assert calculation.rate.id == "rate-1"
        assert calculation.zone.id == "zone-1"
        assert calculation.eta.estimated_delivery_date == date(2024, 1, 10)

    @pytest.mark.asyncio
    async def test_base_rate_when_no_rate_admits(self, shipping_service):
        """Test calculation falls back to base rate."""
        calculation = await shipping_service.calculate_shipping("method-1", "400010", shipment("10"))

        assert calculation.base_rate == Decimal("5.99")
        assert calculation.rate is None
        assert calculation.zone.id == "zone-1"

    @pytest.mark.asyncio
    async def test_excluded_pincode_uses_remaining_zone(self, shipping_service):
        """Test excluded pincode resolves through the other zone."""
        calculation = await shipping_service.calculate_shipping("method-1", "400050", shipment("2"))

        assert calculation.zone.id == "zone-2"
        assert calculation.base_rate == Decimal("5.99")

    @pytest.mark.asyncio
    async def test_rate_transit_days_override_method(self, repository, eta_calculator):
        """Test rate transit days override the method default."""
        repository.rates.append(ShippingRate(
            id="rate-express-metro",
            name="Metro Express",
            rate=Decimal("8.00"),
            shipping_method_id="method-2",
            shipping_zone_id="zone-2",
            estimated_days=2,
        ))
        service = ShippingResolutionService(repository, eta_calculator=eta_calculator)

        calculation = await service.calculate_shipping("method-2", "400010", shipment(as_of=FRIDAY_NOON))

        assert calculation.base_rate == Decimal("8.00")
        assert calculation.zone.id == "zone-2"
        assert calculation.eta.days == 2
        assert calculation.eta.estimated_delivery_date == date(2024, 1, 9)

    @pytest.mark.asyncio
    async def test_unknown_method(self, shipping_service):
        """Test unknown method raises MethodNotFound."""
        with pytest.raises(MethodNotFound) as exc_info:
            await shipping_service.calculate_shipping("nope", "400010", shipment())

        assert type(exc_info.value) is MethodNotFound
        assert exc_info.value.code == "METHOD_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_inactive_method(self, shipping_service):
        """Test disabled method raises MethodInactive."""
        with pytest.raises(MethodInactive) as exc_info:
            await shipping_service.calculate_shipping("method-3", "400010", shipment())

        assert exc_info.value.code == "METHOD_INACTIVE"

    @pytest.mark.asyncio
    async def test_method_checked_before_zone(self, shipping_service):
        """Test method errors win over zone errors."""
        with pytest.raises(MethodNotFound):
            await shipping_service.calculate_shipping("nope", "999999", shipment())

    @pytest.mark.asyncio
    async def test_unserviceable_pincode(self, shipping_service):
        """Test unserviced pincode raises NoServiceableZone."""
        with pytest.raises(NoServiceableZone) as exc_info:
            await shipping_service.calculate_shipping("method-1", "999999", shipment("2"))

        assert exc_info.value.message == "Shipping not available for this location"

    @pytest.mark.asyncio
    async def test_by_code(self, shipping_service):
        """Test calculation by method code."""
        calculation = await shipping_service.calculate_shipping_by_code("standard", "400010", shipment("2"))

        assert calculation.method.id == "method-1"
        assert calculation.base_rate == Decimal("3.99")

    @pytest.mark.asyncio
    async def test_by_code_unknown(self, shipping_service):
        """Test unknown method code raises MethodNotFound."""
        with pytest.raises(MethodNotFound):
            await shipping_service.calculate_shipping_by_code("drone", "400010", shipment())

    @pytest.mark.asyncio
    async def test_by_code_inactive(self, shipping_service):
        """Test disabled method code raises MethodInactive."""
        with pytest.raises(MethodInactive):
            await shipping_service.calculate_shipping_by_code("overnight", "400010", shipment())


class TestRepositoryFailures:

    @pytest.mark.asyncio
    async def test_failed_read_is_repository_unavailable(self, repository):
        """Test repository errors surface as RepositoryUnavailable."""
        repository.list_active_methods = AsyncMock(side_effect=RuntimeError("connection reset"))
        service = ShippingResolutionService(repository)

        with pytest.raises(RepositoryUnavailable) as exc_info:
            await service.list_available_methods("400010", shipment())

        assert exc_info.value.details["operation"] == "list_active_methods"
        assert exc_info.value.http_status == 503

    @pytest.mark.asyncio
    async def test_rate_read_failure_is_not_a_base_rate_fallback(self, repository):
        """Test failed rate read raises instead of quoting base rate."""
        repository.list_active_rates = AsyncMock(side_effect=ConnectionError("gone"))
        service = ShippingResolutionService(repository)

        with pytest.raises(RepositoryUnavailable):
            await service.calculate_shipping("method-1", "400010", shipment("2"))

    @pytest.mark.asyncio
    async def test_per_call_timeout(self, repository):
        """Test per-call timeout overrides the service default."""
        async def stuck(method_id):
            await asyncio.sleep(5)

        repository.get_method = stuck
        service = ShippingResolutionService(repository, timeout=10)

        with pytest.raises(RepositoryUnavailable) as exc_info:
            await service.calculate_shipping("method-1", "400010", shipment(), timeout=0.05)

        assert exc_info.value.details["operation"] == "get_method"
        assert exc_info.value.details["timeout"] == 0.05
