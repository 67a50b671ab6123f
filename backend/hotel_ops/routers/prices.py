"""
价格路由 - 住宿报价与价格日历
"""
from datetime import date, timedelta
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query, status
from hotel_ops.config import settings
from hotel_ops.dependencies import get_price_service, get_store
from hotel_ops.errors import StoreReadError, ValidationError
from hotel_ops.models.schemas import PriceCalendarEntry, StayQuoteRequest, StayQuoteResponse
from hotel_ops.services.price_service import PriceService, apply_tax
from hotel_ops.services.store import MetricsStore

router = APIRouter(prefix="/prices", tags=["价格管理"])


def _load_room_type(store: MetricsStore, room_type_id: int):
    try:
        room_type = store.get_room_type(room_type_id)
    except StoreReadError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)
    if not room_type:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="房型不存在")
    return room_type


@router.post("/quote", response_model=StayQuoteResponse)
def quote_stay(
    data: StayQuoteRequest,
    store: MetricsStore = Depends(get_store),
    service: PriceService = Depends(get_price_service)
):
    """计算住宿报价（房费小计 + 酒店税费）"""
    room_type = _load_room_type(store, data.room_type_id)
    try:
        hotel = store.get_hotel(room_type.hotel_id)
    except StoreReadError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)

    tax_rate = hotel.tax_rate if hotel and hotel.tax_rate is not None else settings.DEFAULT_TAX_RATE
    try:
        quote = service.resolve_stay_total(room_type, data.check_in_date, data.check_out_date)
        tax, total = apply_tax(quote.subtotal, tax_rate)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

    return StayQuoteResponse(
        room_type_id=data.room_type_id,
        nights=quote.nights,
        breakdown=quote.breakdown,
        subtotal=quote.subtotal,
        currency=hotel.currency if hotel else None,
        tax_rate=tax_rate,
        tax=tax,
        total=total,
    )


@router.get("/calendar", response_model=List[PriceCalendarEntry])
def get_price_calendar(
    room_type_id: int,
    start_date: date = Query(default_factory=date.today),
    end_date: date = Query(default_factory=lambda: date.today() + timedelta(days=30)),
    store: MetricsStore = Depends(get_store),
    service: PriceService = Depends(get_price_service)
):
    """获取价格日历"""
    room_type = _load_room_type(store, room_type_id)
    try:
        return service.get_price_calendar(room_type, start_date, end_date)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
