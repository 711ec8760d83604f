"""
Rate catalog: picks the rate that governs a shipment for one method.

Admission (all must hold):
- weight inside [min_weight, max_weight] when a weight is given
- order value inside [min_order_value, max_order_value] when a value is given
- product categories intersect the rate's categories, if it restricts them
- customer group is one of the rate's groups, if both are present
- as_of falls on one of the rate's weekdays, if it restricts them
- as_of wall-clock time falls in one of the rate's windows, if it has any

Ranking of admissible rates:
1. zone priority (lower number wins)
2. price (cheaper wins)
3. condition specificity (more restrictions wins)
4. rate id

Returning None leaves the fallback to the method's base rate with the caller.
"""
import logging
from datetime import timezone, tzinfo
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence

from shipzone.core.utils import sunday_weekday, to_local
from shipzone.modules.shipping.entities import ResolutionContext, ShippingRate, ShippingZone
from shipzone.modules.shipping.repositories import ShippingRepository, bounded_read

logger = logging.getLogger(__name__)


def _within(value: Optional[Decimal], low: Optional[Decimal], high: Optional[Decimal]) -> bool:
    if value is None:
        return True
    if low is not None and value < low:
        return False
    if high and value > high:
        return False
    return True


class RateCatalog:
    def __init__(
        self,
        repository: ShippingRepository,
        tz: tzinfo = timezone.utc,
        timeout: Optional[float] = None,
    ):
        self.repository = repository
        self.tz = tz
        self.timeout = timeout

    def admits(self, rate: ShippingRate, context: ResolutionContext) -> bool:
        """True if every band and condition on the rate accepts the context."""
        if not _within(context.weight, rate.min_weight, rate.max_weight):
            return False
        if not _within(context.order_value, rate.min_order_value, rate.max_order_value):
            return False

        conditions = rate.conditions
        if conditions.product_categories:
            if not conditions.product_categories.intersection(context.product_categories or ()):
                return False

        if conditions.customer_groups and context.customer_group is not None:
            if context.customer_group not in conditions.customer_groups:
                return False

        if conditions.weekdays or conditions.time_ranges:
            local = to_local(context.as_of, self.tz)
            if conditions.weekdays and sunday_weekday(local.date()) not in conditions.weekdays:
                return False
            if conditions.time_ranges:
                wall_clock = local.time()
                if not any(window.contains(wall_clock) for window in conditions.time_ranges):
                    return False

        return True

    def rank(self, rates: Iterable[ShippingRate], zones: Sequence[ShippingZone]) -> List[ShippingRate]:
        """Order admissible rates best first."""
        priorities: Dict[str, int] = {zone.id: zone.priority for zone in zones}

        def key(rate: ShippingRate):
            return (
                priorities.get(rate.shipping_zone_id, 0),
                rate.rate,
                -rate.conditions.specificity,
                str(rate.id),
            )

        return sorted(rates, key=key)

    async def select_best_rate(
        self,
        method_id: str,
        candidate_zones: Sequence[ShippingZone],
        context: ResolutionContext,
        timeout: Optional[float] = None,
    ) -> Optional[ShippingRate]:
        if not candidate_zones:
            return None

        zone_ids = [zone.id for zone in candidate_zones]
        rates = await bounded_read(
            self.repository.list_active_rates(method_id, zone_ids),
            operation="list_active_rates",
            timeout=timeout if timeout is not None else self.timeout,
        )

        wanted = set(zone_ids)
        admissible = [
            rate for rate in rates
            if rate.is_active
            and rate.shipping_method_id == method_id
            and rate.shipping_zone_id in wanted
            and self.admits(rate, context)
        ]
        if not admissible:
            logger.debug(f"No admissible rate for method {method_id} in zones {zone_ids}")
            return None

        best = self.rank(admissible, candidate_zones)[0]
        logger.debug(f"Method {method_id}: rate {best.id} ({best.rate}) wins of {len(admissible)}")
        return best
