"""
SQLAlchemy-backed shipping repository.

Maps ORM rows from shipzone.models.shipping onto engine entities. Reads only.
"""
import logging
from decimal import Decimal
from typing import List, Optional, Sequence

from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession

from shipzone.models import shipping as orm
from shipzone.modules.shipping.entities import (
    RateConditions,
    ShippingMethod,
    ShippingRate,
    ShippingZone,
)
from shipzone.modules.shipping.repositories import ShippingRepository

logger = logging.getLogger(__name__)


def _decimal(value) -> Optional[Decimal]:
    if value is None:
        return None
    return value if isinstance(value, Decimal) else Decimal(str(value))


def zone_from_row(row: orm.ShippingZone) -> ShippingZone:
    return ShippingZone(
        id=str(row.id),
        name=row.name,
        priority=row.priority or 0,
        is_active=bool(row.is_active),
        pincode_patterns=tuple(row.pincode_patterns or ()),
        pincode_ranges=tuple(row.pincode_ranges or ()),
        excluded_pincodes=frozenset(row.excluded_pincodes or ()),
        included_pincodes=frozenset(row.included_pincodes or ()),
    )


def method_from_row(row: orm.ShippingMethod) -> ShippingMethod:
    return ShippingMethod(
        id=str(row.id),
        name=row.name,
        code=row.code,
        base_rate=_decimal(row.base_rate),
        estimated_days=row.estimated_days or 0,
        is_active=bool(row.is_active),
        description=row.description or "",
        icon=row.icon,
    )


def rate_from_row(row: orm.ShippingRate) -> ShippingRate:
    """Raises ValueError when the stored conditions cannot be parsed."""
    return ShippingRate(
        id=str(row.id),
        name=row.name,
        rate=_decimal(row.rate),
        shipping_method_id=str(row.shipping_method_id),
        shipping_zone_id=str(row.shipping_zone_id),
        min_weight=_decimal(row.min_weight),
        max_weight=_decimal(row.max_weight),
        min_order_value=_decimal(row.min_order_value),
        max_order_value=_decimal(row.max_order_value),
        estimated_days=row.estimated_days,
        conditions=RateConditions.from_dict(row.conditions),
        is_active=bool(row.is_active),
    )


class SqlShippingRepository(ShippingRepository):
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_active_zones(self) -> List[ShippingZone]:
        result = await self.db.execute(
            select(orm.ShippingZone).where(orm.ShippingZone.is_active == True)  # noqa: E712
        )
        return [zone_from_row(row) for row in result.scalars().all()]

    async def list_active_rates(self, method_id: str, zone_ids: Sequence[str]) -> List[ShippingRate]:
        if not zone_ids:
            return []
        result = await self.db.execute(
            select(orm.ShippingRate).where(
                and_(
                    orm.ShippingRate.shipping_method_id == method_id,
                    orm.ShippingRate.shipping_zone_id.in_(list(zone_ids)),
                    orm.ShippingRate.is_active == True,  # noqa: E712
                )
            )
        )
        rates = []
        for row in result.scalars().all():
            try:
                rates.append(rate_from_row(row))
            except ValueError as e:
                # Rates with unreadable conditions are never admitted
                logger.warning(f"Skipping rate {row.id}: invalid conditions: {e}")
        return rates

    async def get_method(self, method_id: str) -> Optional[ShippingMethod]:
        result = await self.db.execute(
            select(orm.ShippingMethod).where(orm.ShippingMethod.id == method_id)
        )
        row = result.scalar_one_or_none()
        return method_from_row(row) if row else None

    async def get_method_by_code(self, code: str) -> Optional[ShippingMethod]:
        result = await self.db.execute(
            select(orm.ShippingMethod).where(orm.ShippingMethod.code == code)
        )
        row = result.scalar_one_or_none()
        return method_from_row(row) if row else None

    async def list_active_methods(self) -> List[ShippingMethod]:
        result = await self.db.execute(
            select(orm.ShippingMethod).where(orm.ShippingMethod.is_active == True)  # noqa: E712
        )
        return [method_from_row(row) for row in result.scalars().all()]
