"""Fee schedule and deduction calculator endpoints"""

from decimal import Decimal
from fastapi import APIRouter, HTTPException, Query

from produce_ledger.api.v1.schemas import DeductionRequest, DeductionResponse, FeeStructureResponse, NetPriceResponse
from produce_ledger.domain.exceptions import InvalidCategoryError, InvalidInputError
from produce_ledger.domain.fees import (
    calculate_deductions,
    calculate_net_price_per_kg,
    get_fee_structure,
    get_minimum_quantity,
    parse_shipment_size,
    to_money,
)

router = APIRouter()


@router.get("/fees/structure/{shipment_size}", response_model=FeeStructureResponse)
def get_structure(shipment_size: str):
    """Fee schedule for a shipment-size tier"""
    try:
        tier = parse_shipment_size(shipment_size)
    except InvalidCategoryError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return FeeStructureResponse.from_domain(tier.value, get_fee_structure(tier), get_minimum_quantity())


@router.post("/fees/deductions", response_model=DeductionResponse)
def create_deduction_breakdown(request_body: DeductionRequest):
    """
    Compute platform, transport, grading, finance and savings deductions.

    Returns:
        Breakdown rounded to cents; total_deductions + net_amount == gross_amount
    """
    try:
        breakdown = calculate_deductions(
            request_body.gross_amount,
            request_body.quantity_kg,
            request_body.shipment_size,
        )
    except InvalidCategoryError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return DeductionResponse.from_domain(breakdown)


@router.get("/fees/net-price", response_model=NetPriceResponse)
def get_net_price(
    price_per_kg: Decimal = Query(..., description="Gross price per kg in KES"),
    shipment_size: str = Query(..., description="Tier, e.g. 6ton"),
):
    """Price per kg left to the producer after deductions"""
    try:
        tier = parse_shipment_size(shipment_size)
        net_price = calculate_net_price_per_kg(price_per_kg, tier)
    except InvalidCategoryError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return NetPriceResponse(
        shipment_size=tier.value,
        price_per_kg=to_money(price_per_kg),
        net_price_per_kg=to_money(net_price),
    )
