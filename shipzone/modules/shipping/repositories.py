"""
Data collaborators for the shipping engine.

The engine only ever reads. Storage adapters implement ShippingRepository;
every call the engine makes goes through bounded_read(), which applies the
caller's timeout and turns any collaborator failure into RepositoryUnavailable.
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Awaitable, Iterable, List, Optional, Sequence, TypeVar

from shipzone.core.exceptions import RepositoryUnavailable
from shipzone.modules.shipping.entities import ShippingMethod, ShippingRate, ShippingZone

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def bounded_read(awaitable: Awaitable[T], operation: str, timeout: Optional[float] = None) -> T:
    """
    Await a repository read, bounded by timeout seconds when given.

    Raises:
        RepositoryUnavailable: the read failed or timed out
    """
    try:
        if timeout:
            return await asyncio.wait_for(awaitable, timeout)
        return await awaitable
    except RepositoryUnavailable:
        raise
    except asyncio.TimeoutError as e:
        logger.error(f"Repository read {operation} timed out after {timeout}s")
        raise RepositoryUnavailable(operation, "timed out", timeout=timeout) from e
    except Exception as e:
        logger.error(f"Repository read {operation} failed: {e}")
        raise RepositoryUnavailable(operation, str(e) or e.__class__.__name__) from e


class ShippingRepository(ABC):
    """
    Read-only access to zones, methods and rates.

    Implementations:
    - InMemoryShippingRepository: fixed snapshot, used by tests and embedders
    - SqlShippingRepository: SQLAlchemy async session
    """

    @abstractmethod
    async def list_active_zones(self) -> List[ShippingZone]:
        pass

    @abstractmethod
    async def list_active_rates(self, method_id: str, zone_ids: Sequence[str]) -> List[ShippingRate]:
        pass

    @abstractmethod
    async def get_method(self, method_id: str) -> Optional[ShippingMethod]:
        """Return the method regardless of is_active, or None if it does not exist."""
        pass

    @abstractmethod
    async def get_method_by_code(self, code: str) -> Optional[ShippingMethod]:
        """Return the method regardless of is_active, or None if it does not exist."""
        pass

    @abstractmethod
    async def list_active_methods(self) -> List[ShippingMethod]:
        pass


class InMemoryShippingRepository(ShippingRepository):
    """Repository over an in-memory snapshot."""

    def __init__(
        self,
        zones: Iterable[ShippingZone] = (),
        methods: Iterable[ShippingMethod] = (),
        rates: Iterable[ShippingRate] = (),
    ):
        self.zones = list(zones)
        self.methods = list(methods)
        self.rates = list(rates)

    async def list_active_zones(self) -> List[ShippingZone]:
        return [zone for zone in self.zones if zone.is_active]

    async def list_active_rates(self, method_id: str, zone_ids: Sequence[str]) -> List[ShippingRate]:
        wanted = set(zone_ids)
        return [
            rate for rate in self.rates
            if rate.is_active
            and rate.shipping_method_id == method_id
            and rate.shipping_zone_id in wanted
        ]

    async def get_method(self, method_id: str) -> Optional[ShippingMethod]:
        for method in self.methods:
            if method.id == method_id:
                return method
        return None

    async def get_method_by_code(self, code: str) -> Optional[ShippingMethod]:
        for method in self.methods:
            if method.code == code:
                return method
        return None

    async def list_active_methods(self) -> List[ShippingMethod]:
        return [method for method in self.methods if method.is_active]
