"""
Shipping API Routes

Provides endpoints for:
- Method listing (all active methods)
- Availability (methods that ship to a pincode, priced and dated)
- Calculation (price and ETA for one method)

No zone coverage is an empty list on the availability endpoint and a 422 on
the calculation endpoint.
"""
import logging
from decimal import Decimal
from typing import List, NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from shipzone.api.deps import get_shipping_service
from shipzone.core.exceptions import ShipzoneError
from shipzone.modules.shipping.service import ShippingResolutionService
from shipzone.schemas.shipping import (
    MethodQuoteResponse,
    ShipmentDetails,
    ShippingCalculationRequest,
    ShippingCalculationResponse,
    ShippingMethodResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/shipping", tags=["shipping"])


def raise_http(error: ShipzoneError) -> NoReturn:
    """Map an engine error onto its HTTP status."""
    if error.http_status >= 500:
        logger.error(f"Shipping resolution failed: {error.to_dict()}")
    else:
        logger.info(f"Shipping request rejected: {error.code} {error.message}")
    raise HTTPException(
        status_code=error.http_status,
        detail={"code": error.code, "message": error.message},
    )


@router.get("/methods", response_model=List[ShippingMethodResponse])
async def list_shipping_methods(
    service: ShippingResolutionService = Depends(get_shipping_service),
):
    """Get all active shipping methods, fastest first."""
    try:
        methods = await service.list_methods()
    except ShipzoneError as e:
        raise_http(e)
    return [ShippingMethodResponse.model_validate(method) for method in methods]


@router.get("/methods/available", response_model=List[MethodQuoteResponse])
async def get_available_shipping_methods(
    pincode: str = Query(..., description="Delivery location pincode"),
    weight: Optional[Decimal] = Query(None, ge=0, description="Package weight in kg"),
    order_value: Optional[Decimal] = Query(None, ge=0, description="Order value for rate calculation"),
    product_categories: List[str] = Query([], description="Product categories in the order"),
    customer_group: Optional[str] = Query(None, description="Customer group for special rates"),
    service: ShippingResolutionService = Depends(get_shipping_service),
):
    """Get shipping methods available for a location."""
    details = ShipmentDetails(
        weight=weight,
        order_value=order_value,
        product_categories=product_categories,
        customer_group=customer_group,
    )
    try:
        quotes = await service.list_available_methods(pincode, details.to_context(pincode))
    except ShipzoneError as e:
        raise_http(e)
    return [MethodQuoteResponse.from_quote(quote) for quote in quotes]


@router.post("/eta", response_model=ShippingCalculationResponse)
async def calculate_shipping_eta(
    request: ShippingCalculationRequest,
    service: ShippingResolutionService = Depends(get_shipping_service),
):
    """Calculate price and estimated delivery for one method and location."""
    context = request.to_context(request.pincode)
    try:
        if request.method_id:
            calculation = await service.calculate_shipping(request.method_id, request.pincode, context)
        else:
            calculation = await service.calculate_shipping_by_code(request.method_code, request.pincode, context)
    except ShipzoneError as e:
        raise_http(e)
    return ShippingCalculationResponse.from_calculation(calculation)
