"""
Zone resolution: which active zones cover a destination, most specific first.
"""
import logging
from typing import Dict, Iterable, List, Optional

from shipzone.modules.shipping.entities import ShippingZone
from shipzone.modules.shipping.pincode import CompiledZone, PincodeMatcher
from shipzone.modules.shipping.repositories import ShippingRepository, bounded_read

logger = logging.getLogger(__name__)


def zone_sort_key(zone: ShippingZone):
    return (zone.priority, str(zone.id))


class ZoneResolver:
    def __init__(self, repository: ShippingRepository, timeout: Optional[float] = None):
        self.repository = repository
        self.timeout = timeout

    async def _compiled_zones(self, timeout: Optional[float]) -> List[CompiledZone]:
        zones = await bounded_read(
            self.repository.list_active_zones(),
            operation="list_active_zones",
            timeout=timeout,
        )
        return [PincodeMatcher.compile(zone) for zone in zones if zone.is_active]

    @staticmethod
    def _match(compiled: List[CompiledZone], pincode: str) -> List[ShippingZone]:
        matched = [c.zone for c in compiled if c.matches(pincode)]
        return sorted(matched, key=zone_sort_key)

    async def resolve(self, pincode: str, timeout: Optional[float] = None) -> List[ShippingZone]:
        """
        Active zones matching the pincode, ascending by priority then id.

        An empty list means "we do not ship here", not an error.
        """
        compiled = await self._compiled_zones(timeout if timeout is not None else self.timeout)
        zones = self._match(compiled, pincode)
        if zones:
            logger.debug(f"Pincode {pincode} matched zones {[z.id for z in zones]}")
        else:
            logger.warning(f"No shipping zones found for pincode {pincode}")
        return zones

    async def resolve_many(
        self,
        pincodes: Iterable[str],
        timeout: Optional[float] = None,
    ) -> Dict[str, List[ShippingZone]]:
        """Resolve several pincodes against one load and compile of the zones."""
        compiled = await self._compiled_zones(timeout if timeout is not None else self.timeout)
        return {pincode: self._match(compiled, pincode) for pincode in pincodes}
