"""
Shipping Schemas

Pydantic models for the shipping API and for validating admin-authored
zones, methods and rates before they are stored.
"""
import re
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from shipzone.modules.shipping.entities import (
    MethodQuote,
    RateConditions,
    ResolutionContext,
    ShippingCalculation,
    ShippingMethod,
    TimeWindow,
    parse_clock,
)
from shipzone.modules.shipping.pincode import parse_range

METHOD_CODE_RE = re.compile(r"^[a-z0-9]+(?:[_-][a-z0-9]+)*$")


# ==================== Request Schemas ====================


class ShipmentDetails(BaseModel):
    """Shipment attributes shared by listing and calculation requests."""
    weight: Optional[Decimal] = Field(None, ge=0, description="Package weight in kg")
    order_value: Optional[Decimal] = Field(None, ge=0, description="Order value for rate calculation")
    product_categories: List[str] = Field(default_factory=list, description="Product categories in the order")
    customer_group: Optional[str] = Field(None, description="Customer group for special rates")
    as_of: Optional[datetime] = Field(None, description="Reference time; defaults to now")

    def to_context(self, pincode: str) -> ResolutionContext:
        fields = dict(
            pincode=pincode,
            weight=self.weight,
            order_value=self.order_value,
            product_categories=frozenset(self.product_categories),
            customer_group=self.customer_group,
        )
        if self.as_of is not None:
            fields["as_of"] = self.as_of
        return ResolutionContext(**fields)


class ShippingCalculationRequest(ShipmentDetails):
    """Calculate price and ETA for one method. Exactly one of method_id / method_code."""
    pincode: str = Field(..., min_length=1, max_length=20, description="Delivery location pincode")
    method_id: Optional[str] = None
    method_code: Optional[str] = None

    @model_validator(mode="after")
    def require_one_method_ref(self):
        if bool(self.method_id) == bool(self.method_code):
            raise ValueError("Exactly one of method_id or method_code must be provided")
        return self


# ==================== Response Schemas ====================


class ETAResponse(BaseModel):
    days: int
    estimated_delivery_date: date

    class Config:
        from_attributes = True


class ShippingMethodResponse(BaseModel):
    id: str
    name: str
    code: str
    description: str = ""
    base_rate: Decimal
    estimated_days: int
    icon: Optional[str] = None

    class Config:
        from_attributes = True


class MethodQuoteResponse(ShippingMethodResponse):
    """An available method with the price that applies to this shipment."""
    rate: Decimal
    rate_id: Optional[str] = None
    eta: ETAResponse

    @classmethod
    def from_quote(cls, quote: MethodQuote) -> "MethodQuoteResponse":
        method = quote.method
        return cls(
            id=method.id,
            name=method.name,
            code=method.code,
            description=method.description,
            base_rate=method.base_rate,
            estimated_days=method.estimated_days,
            icon=method.icon,
            rate=quote.price,
            rate_id=quote.rate.id if quote.rate else None,
            eta=ETAResponse.model_validate(quote.eta),
        )


class ShippingCalculationResponse(BaseModel):
    id: str
    name: str
    code: str
    description: str = ""
    base_rate: Decimal = Field(..., description="Price charged: the winning rate, else the method base rate")
    estimated_days: int = Field(..., description="Method default transit days")
    zone_id: str
    zone_name: str
    rate_id: Optional[str] = None
    eta: ETAResponse

    @classmethod
    def from_calculation(cls, calc: ShippingCalculation) -> "ShippingCalculationResponse":
        method: ShippingMethod = calc.method
        return cls(
            id=method.id,
            name=method.name,
            code=method.code,
            description=method.description,
            base_rate=calc.base_rate,
            estimated_days=method.estimated_days,
            zone_id=calc.zone.id,
            zone_name=calc.zone.name,
            rate_id=calc.rate.id if calc.rate else None,
            eta=ETAResponse.model_validate(calc.eta),
        )


# ==================== Admin Input Schemas ====================


class ShippingZoneCreate(BaseModel):
    """Zone definition. Rejects patterns that do not compile and ranges that do not parse."""
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    priority: int = 0
    is_active: bool = True
    pincode_patterns: List[str] = Field(default_factory=list)
    pincode_ranges: List[str] = Field(default_factory=list)
    included_pincodes: List[str] = Field(default_factory=list)
    excluded_pincodes: List[str] = Field(default_factory=list)

    @field_validator("pincode_patterns")
    @classmethod
    def validate_patterns(cls, v):
        for pattern in v:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"Invalid pincode pattern {pattern!r}: {e}")
        return v

    @field_validator("pincode_ranges")
    @classmethod
    def validate_ranges(cls, v):
        for value in v:
            if parse_range(value) is None:
                raise ValueError(f"Invalid pincode range {value!r}; expected '<low>-<high>' with low <= high")
        return [value.strip() for value in v]

    @field_validator("included_pincodes", "excluded_pincodes")
    @classmethod
    def strip_pincodes(cls, v):
        return [p.strip() for p in v if p.strip()]


class ShippingMethodCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    code: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = None
    icon: Optional[str] = None
    base_rate: Decimal = Field(..., ge=0)
    estimated_days: int = Field(..., ge=0)
    is_active: bool = True

    @field_validator("code")
    @classmethod
    def validate_code(cls, v):
        v = v.strip().lower()
        if not METHOD_CODE_RE.match(v):
            raise ValueError("Method code must be a lowercase slug (letters, digits, '-' or '_')")
        return v


class TimeRangeSchema(BaseModel):
    start: str = Field(..., description="HH:MM, inclusive")
    end: str = Field(..., description="HH:MM, exclusive")

    @field_validator("start", "end")
    @classmethod
    def validate_clock(cls, v):
        parse_clock(v)
        return v.strip()


class RateConditionsSchema(BaseModel):
    product_categories: List[str] = Field(default_factory=list)
    customer_groups: List[str] = Field(default_factory=list)
    weekdays: List[int] = Field(default_factory=list, description="Sunday=0 .. Saturday=6")
    time_ranges: List[TimeRangeSchema] = Field(default_factory=list)

    @field_validator("weekdays")
    @classmethod
    def validate_weekdays(cls, v):
        for day in v:
            if day < 0 or day > 6:
                raise ValueError(f"Weekday {day} out of range; use 0 (Sunday) to 6 (Saturday)")
        return sorted(set(v))

    def to_entity(self) -> RateConditions:
        return RateConditions(
            product_categories=frozenset(self.product_categories),
            customer_groups=frozenset(self.customer_groups),
            weekdays=frozenset(self.weekdays),
            time_ranges=tuple(
                TimeWindow(start=parse_clock(w.start), end=parse_clock(w.end))
                for w in self.time_ranges
            ),
        )


class ShippingRateCreate(BaseModel):
    """Rate definition. A max bound of 0 or None means unbounded."""
    name: str = Field(..., min_length=1, max_length=100)
    rate: Decimal = Field(..., ge=0)
    shipping_method_id: str = Field(..., min_length=1)
    shipping_zone_id: str = Field(..., min_length=1)
    min_weight: Optional[Decimal] = Field(None, ge=0)
    max_weight: Optional[Decimal] = Field(None, ge=0)
    min_order_value: Optional[Decimal] = Field(None, ge=0)
    max_order_value: Optional[Decimal] = Field(None, ge=0)
    estimated_days: Optional[int] = Field(None, ge=0)
    conditions: Optional[RateConditionsSchema] = None
    is_active: bool = True

    @model_validator(mode="after")
    def validate_bands(self):
        for label, low, high in (
            ("weight", self.min_weight, self.max_weight),
            ("order value", self.min_order_value, self.max_order_value),
        ):
            if low is not None and high and low > high:
                raise ValueError(f"Minimum {label} {low} exceeds maximum {high}")
        return self
