"""
Shipping Resolution Service

Orchestrates zone resolution, rate selection and ETA calculation:

    caller -> ShippingResolutionService -> ZoneResolver -> RateCatalog -> ETACalculator

Public operations:
- list_methods: active methods, fastest first
- list_available_methods: every method that can ship to a pincode, priced and dated
- calculate_shipping / calculate_shipping_by_code: lock in price and ETA for one method

Read path only; holds no state between calls. Availability is zone driven
(any matching zone lists every active method), price is rate driven (winning
rate, else the method's base rate).
"""
import dataclasses
import logging
from typing import List, Optional, Sequence, Tuple

from shipzone.core.config import settings
from shipzone.core.exceptions import MethodInactive, MethodNotFound, NoServiceableZone
from shipzone.modules.shipping.entities import (
    ETAResult,
    MethodQuote,
    ResolutionContext,
    ShippingCalculation,
    ShippingMethod,
    ShippingRate,
    ShippingZone,
)
from shipzone.modules.shipping.eta import ETACalculator, HolidayCalendar
from shipzone.modules.shipping.pincode import normalize_pincode
from shipzone.modules.shipping.rates import RateCatalog
from shipzone.modules.shipping.repositories import ShippingRepository, bounded_read
from shipzone.modules.shipping.zones import ZoneResolver

logger = logging.getLogger(__name__)


def method_sort_key(method: ShippingMethod):
    return (method.estimated_days, method.name, str(method.id))


class ShippingResolutionService:
    """
    Central service for shipping availability and pricing.

    Every collaborator read is bounded by `timeout` seconds (per call argument,
    else the service default, else SHIPPING_REPOSITORY_TIMEOUT_SECONDS).
    """

    def __init__(
        self,
        repository: ShippingRepository,
        zone_resolver: Optional[ZoneResolver] = None,
        rate_catalog: Optional[RateCatalog] = None,
        eta_calculator: Optional[ETACalculator] = None,
        timeout: Optional[float] = None,
        pincode_format: Optional[str] = None,
    ):
        self.repository = repository
        self.timeout = timeout if timeout is not None else settings.repository_timeout
        self.pincode_format = pincode_format or settings.SHIPPING_PINCODE_FORMAT
        self.zone_resolver = zone_resolver or ZoneResolver(repository, timeout=self.timeout)
        self.rate_catalog = rate_catalog or RateCatalog(
            repository, tz=settings.shipping_tz, timeout=self.timeout
        )
        self.eta_calculator = eta_calculator or ETACalculator(
            holidays=HolidayCalendar(settings.shipping_holidays),
            tz=settings.shipping_tz,
            cutoff=settings.dispatch_cutoff,
        )

    def _timeout(self, timeout: Optional[float]) -> Optional[float]:
        return timeout if timeout is not None else self.timeout

    def _context(self, pincode: str, context: Optional[ResolutionContext]) -> ResolutionContext:
        """Validate the destination and bind it to the context. Raises InvalidPincodeFormat."""
        cleaned = normalize_pincode(pincode, self.pincode_format)
        if context is None:
            return ResolutionContext(pincode=cleaned)
        return dataclasses.replace(context, pincode=cleaned)

    async def _price(
        self,
        method: ShippingMethod,
        zones: Sequence[ShippingZone],
        context: ResolutionContext,
        timeout: Optional[float],
    ) -> Tuple[Optional[ShippingRate], ETAResult]:
        rate = await self.rate_catalog.select_best_rate(method.id, zones, context, timeout=timeout)
        days = method.estimated_days
        if rate is not None and rate.estimated_days is not None:
            days = rate.estimated_days
        eta = self.eta_calculator.estimate(days, context.as_of)
        return rate, eta

    # ==================== Method Listing ====================

    async def list_methods(self, timeout: Optional[float] = None) -> List[ShippingMethod]:
        """All active shipping methods, fastest first."""
        methods = await bounded_read(
            self.repository.list_active_methods(),
            operation="list_active_methods",
            timeout=self._timeout(timeout),
        )
        return sorted((m for m in methods if m.is_active), key=method_sort_key)

    async def list_available_methods(
        self,
        pincode: str,
        context: Optional[ResolutionContext] = None,
        timeout: Optional[float] = None,
    ) -> List[MethodQuote]:
        """
        Methods that can ship to `pincode`, each with its price and ETA.

        Returns an empty list when no zone covers the pincode.

        Raises:
            InvalidPincodeFormat: malformed pincode
            RepositoryUnavailable: a data read failed or timed out
        """
        context = self._context(pincode, context)
        timeout = self._timeout(timeout)

        zones = await self.zone_resolver.resolve(context.pincode, timeout=timeout)
        if not zones:
            return []

        methods = await self.list_methods(timeout=timeout)

        # One method at a time: repository reads may share a single session
        quotes = []
        for method in methods:
            rate, eta = await self._price(method, zones, context, timeout)
            price = rate.rate if rate is not None else method.base_rate
            quotes.append(MethodQuote(method=method, price=price, eta=eta, rate=rate))

        logger.debug(f"Pincode {context.pincode}: {len(quotes)} shipping methods available")
        return quotes

    # ==================== Shipping Calculation ====================

    async def calculate_shipping(
        self,
        method_id: str,
        pincode: str,
        context: Optional[ResolutionContext] = None,
        timeout: Optional[float] = None,
    ) -> ShippingCalculation:
        """
        Price and date one method for a destination.

        Raises:
            InvalidPincodeFormat: malformed pincode
            MethodNotFound: no such method
            MethodInactive: method exists but is disabled
            NoServiceableZone: no active zone covers the pincode
            RepositoryUnavailable: a data read failed or timed out
        """
        context = self._context(pincode, context)
        timeout = self._timeout(timeout)
        method = await bounded_read(
            self.repository.get_method(method_id),
            operation="get_method",
            timeout=timeout,
        )
        return await self._calculate(method, method_id, context, timeout)

    async def calculate_shipping_by_code(
        self,
        method_code: str,
        pincode: str,
        context: Optional[ResolutionContext] = None,
        timeout: Optional[float] = None,
    ) -> ShippingCalculation:
        """Same as calculate_shipping, addressing the method by its code."""
        context = self._context(pincode, context)
        timeout = self._timeout(timeout)
        method = await bounded_read(
            self.repository.get_method_by_code(method_code),
            operation="get_method_by_code",
            timeout=timeout,
        )
        return await self._calculate(method, method_code, context, timeout)

    async def _calculate(
        self,
        method: Optional[ShippingMethod],
        method_ref: str,
        context: ResolutionContext,
        timeout: Optional[float],
    ) -> ShippingCalculation:
        if method is None:
            raise MethodNotFound(method_ref)
        if not method.is_active:
            raise MethodInactive(method_ref)

        zones = await self.zone_resolver.resolve(context.pincode, timeout=timeout)
        if not zones:
            raise NoServiceableZone(context.pincode)

        rate, eta = await self._price(method, zones, context, timeout)
        if rate is None:
            logger.debug(f"Method {method.code}: no rate for {context.pincode}, using base rate")
            return ShippingCalculation(method=method, base_rate=method.base_rate, eta=eta, zone=zones[0])

        zone = next(z for z in zones if z.id == rate.shipping_zone_id)
        return ShippingCalculation(method=method, base_rate=rate.rate, eta=eta, zone=zone, rate=rate)
