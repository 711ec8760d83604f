"""
API dependencies
"""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shipzone.core.database import get_db
from shipzone.modules.shipping.repositories import ShippingRepository
from shipzone.modules.shipping.service import ShippingResolutionService
from shipzone.modules.shipping.sql_repository import SqlShippingRepository


async def get_shipping_repository(db: AsyncSession = Depends(get_db)) -> ShippingRepository:
    """Repository over the request's database session"""
    return SqlShippingRepository(db)


async def get_shipping_service(
    repository: ShippingRepository = Depends(get_shipping_repository),
) -> ShippingResolutionService:
    """Resolution service for one request"""
    return ShippingResolutionService(repository)
