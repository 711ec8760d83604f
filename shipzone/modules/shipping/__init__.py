"""
Shipping Module

Zone and rate resolution for checkout:
- PincodeMatcher: does a pincode fall inside a zone
- ZoneResolver: active zones covering a pincode, most specific first
- RateCatalog: the rate governing a shipment for one method
- ETACalculator: business-day delivery dates
- ShippingResolutionService: the public operations built on the above
"""
from shipzone.modules.shipping.entities import (
    ETAResult,
    MethodQuote,
    RateConditions,
    ResolutionContext,
    ShippingCalculation,
    ShippingMethod,
    ShippingRate,
    ShippingZone,
    TimeWindow,
)
from shipzone.modules.shipping.eta import ETACalculator, HolidayCalendar
from shipzone.modules.shipping.pincode import CompiledZone, PincodeMatcher
from shipzone.modules.shipping.rates import RateCatalog
from shipzone.modules.shipping.repositories import InMemoryShippingRepository, ShippingRepository
from shipzone.modules.shipping.service import ShippingResolutionService
from shipzone.modules.shipping.zones import ZoneResolver

__all__ = [
    "CompiledZone",
    "ETACalculator",
    "ETAResult",
    "HolidayCalendar",
    "InMemoryShippingRepository",
    "MethodQuote",
    "PincodeMatcher",
    "RateCatalog",
    "RateConditions",
    "ResolutionContext",
    "ShippingCalculation",
    "ShippingMethod",
    "ShippingRate",
    "ShippingRepository",
    "ShippingResolutionService",
    "ShippingZone",
    "TimeWindow",
    "ZoneResolver",
]
