"""
Shipping engine entities.

Immutable value objects the resolution engine works on. Storage adapters map
their rows onto these; nothing in the engine mutates them.
"""
from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Dict, FrozenSet, Optional, Tuple

from shipzone.core.utils import utcnow


def parse_clock(value: Any) -> time:
    """Parse "HH:MM" or "HH:MM:SS" (or pass a time through)."""
    if isinstance(value, time):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Invalid wall-clock time: {value!r}")
    return time.fromisoformat(value.strip())


@dataclass(frozen=True)
class TimeWindow:
    """Wall-clock window, start inclusive and end exclusive. start > end wraps past midnight."""
    start: time
    end: time

    def contains(self, moment: time) -> bool:
        moment = moment.replace(tzinfo=None)
        if self.start < self.end:
            return self.start <= moment < self.end
        if self.start > self.end:
            return moment >= self.start or moment < self.end
        return False


@dataclass(frozen=True)
class RateConditions:
    """
    Optional qualifiers narrowing when a rate applies.

    Every empty collection means "no restriction" for that qualifier.
    Weekdays use Sunday=0 .. Saturday=6.
    """
    product_categories: FrozenSet[str] = frozenset()
    customer_groups: FrozenSet[str] = frozenset()
    weekdays: FrozenSet[int] = frozenset()
    time_ranges: Tuple[TimeWindow, ...] = ()

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "RateConditions":
        """
        Build from the stored JSON qualifier (camelCase or snake_case keys).

        Raises ValueError when the qualifier is not an object, a qualifier is
        not a list, weekdays fall outside 0-6 or a window is malformed.
        """
        if not data:
            return cls()
        if not isinstance(data, dict):
            raise ValueError(f"Rate conditions must be an object, got {type(data).__name__}")

        def pick(camel: str, snake: str):
            value = data.get(camel, data.get(snake))
            if value is None:
                return ()
            if not isinstance(value, (list, tuple, set, frozenset)):
                raise ValueError(f"Condition {camel!r} must be a list, got {type(value).__name__}")
            return value

        raw_weekdays = pick("weekdays", "weekdays")
        try:
            weekdays = frozenset(int(day) for day in raw_weekdays)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Weekdays must be integers: {e}") from e
        if any(day < 0 or day > 6 for day in weekdays):
            raise ValueError(f"Weekdays must be 0-6 (Sunday=0), got {sorted(weekdays)}")

        windows = []
        for window in pick("timeRanges", "time_ranges"):
            if not isinstance(window, dict) or "start" not in window or "end" not in window:
                raise ValueError(f"Malformed time range: {window!r}")
            windows.append(TimeWindow(start=parse_clock(window["start"]), end=parse_clock(window["end"])))

        return cls(
            product_categories=frozenset(str(c) for c in pick("productCategories", "product_categories")),
            customer_groups=frozenset(str(g) for g in pick("customerGroups", "customer_groups")),
            weekdays=weekdays,
            time_ranges=tuple(windows),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "productCategories": sorted(self.product_categories),
            "customerGroups": sorted(self.customer_groups),
            "weekdays": sorted(self.weekdays),
            "timeRanges": [
                {"start": w.start.strftime("%H:%M"), "end": w.end.strftime("%H:%M")}
                for w in self.time_ranges
            ],
        }

    @property
    def specificity(self) -> int:
        """Number of qualifiers that actually restrict the rate."""
        return sum(
            1 for restriction in (
                self.product_categories,
                self.customer_groups,
                self.weekdays,
                self.time_ranges,
            ) if restriction
        )


@dataclass(frozen=True)
class ShippingZone:
    id: str
    name: str
    priority: int = 0
    is_active: bool = True
    pincode_patterns: Tuple[str, ...] = ()
    pincode_ranges: Tuple[str, ...] = ()
    excluded_pincodes: FrozenSet[str] = frozenset()
    included_pincodes: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class ShippingMethod:
    id: str
    name: str
    code: str
    base_rate: Decimal
    estimated_days: int
    is_active: bool = True
    description: str = ""
    icon: Optional[str] = None


@dataclass(frozen=True)
class ShippingRate:
    """
    Priced refinement of exactly one (method, zone) pair.

    A max bound of None or 0 means unbounded.
    """
    id: str
    name: str
    rate: Decimal
    shipping_method_id: str
    shipping_zone_id: str
    min_weight: Optional[Decimal] = None
    max_weight: Optional[Decimal] = None
    min_order_value: Optional[Decimal] = None
    max_order_value: Optional[Decimal] = None
    estimated_days: Optional[int] = None
    conditions: RateConditions = field(default_factory=RateConditions)
    is_active: bool = True


@dataclass(frozen=True)
class ResolutionContext:
    """Per-request shipment attributes. Never persisted."""
    pincode: str = ""
    weight: Optional[Decimal] = None
    order_value: Optional[Decimal] = None
    product_categories: FrozenSet[str] = frozenset()
    customer_group: Optional[str] = None
    as_of: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class ETAResult:
    days: int
    estimated_delivery_date: date


@dataclass(frozen=True)
class MethodQuote:
    """One entry of the available-methods listing."""
    method: ShippingMethod
    price: Decimal
    eta: ETAResult
    rate: Optional[ShippingRate] = None

    @property
    def uses_base_rate(self) -> bool:
        return self.rate is None


@dataclass(frozen=True)
class ShippingCalculation:
    """Locked-in price and ETA for one method and destination."""
    method: ShippingMethod
    base_rate: Decimal
    eta: ETAResult
    zone: ShippingZone
    rate: Optional[ShippingRate] = None
