"""
Pydantic 模式定义
用于 API 请求/响应验证，以及引擎各组件之间传递的结果对象
"""
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from hotel_ops.engine.event_bus import EventType


# ============== 定价 Schemas ==============

class NightlyPrice(BaseModel):
    date: date
    price: Decimal


class StayQuote(BaseModel):
    """一次住宿的逐晚价格与小计（不含税费）"""
    model_config = ConfigDict(frozen=True)

    nights: int = Field(..., ge=1)
    breakdown: List[NightlyPrice]
    subtotal: Decimal


class StayQuoteRequest(BaseModel):
    room_type_id: int
    check_in_date: date
    check_out_date: date


class StayQuoteResponse(StayQuote):
    room_type_id: int
    currency: Optional[str] = None
    tax_rate: Decimal
    tax: Decimal
    total: Decimal


class PriceCalendarEntry(BaseModel):
    date: date
    price: Decimal
    is_weekend: bool
    tier: str


# ============== 仪表盘 Schemas ==============

class DashboardMetrics(BaseModel):
    """仪表盘统计结果，缓存中保存的就是这个不可变对象"""
    model_config = ConfigDict(frozen=True)

    hotel_id: int
    as_of: date

    # 入住率
    occupancy_today: float
    occupancy_this_week: float

    # 营收
    revenue_today: Decimal
    revenue_this_month: Decimal

    # 今日预抵/预离
    check_ins_today: int
    check_outs_today: int

    # 房态
    room_status_counts: Dict[str, int]
    dirty_rooms_count: int
    maintenance_rooms_count: int
    total_rooms: int
    occupied_rooms: int
    available_rooms: int


# ============== 报表 Schemas ==============

class OccupancyReportRow(BaseModel):
    date: date
    total_rooms: int
    occupied_rooms: int
    occupancy_percentage: float


class OccupancySummary(BaseModel):
    average_occupancy: float
    max_occupancy: float
    min_occupancy: float
    total_days: int


class RevenueByRoomType(BaseModel):
    room_type_id: Optional[int]
    room_type_name: str
    revenue: Decimal
    reservation_count: int


class RevenueByService(BaseModel):
    service_id: Optional[int]
    service_name: str
    revenue: Decimal
    order_count: int


class RevenueReport(BaseModel):
    total_revenue: Decimal
    room_revenue: Decimal
    service_revenue: Decimal
    revenue_by_room_type: List[RevenueByRoomType] = []
    revenue_by_service: List[RevenueByService] = []


class BookingsBySource(BaseModel):
    source: str
    count: int
    percentage: float


class CancellationsByDate(BaseModel):
    date: date
    cancelled: int
    no_shows: int
    total: int


class ReservationSummary(BaseModel):
    total_bookings: int
    total_cancellations: int
    total_no_shows: int
    cancellation_rate: float      # 百分比，两位小数
    no_show_rate: float


class ReservationReport(BaseModel):
    """预订报表：按渠道、按创建日期的取消/未到店"""
    bookings_by_source: List[BookingsBySource] = []
    cancellations_and_no_shows: List[CancellationsByDate] = []
    summary: ReservationSummary


# ============== 事件 Schemas ==============

class EventPublishRequest(BaseModel):
    event_type: EventType
    data: Dict[str, Any] = Field(default_factory=dict)   # 通常包含 hotel_id
    source: str = ""


class EventPublishResponse(BaseModel):
    event_type: str
    subscriber_count: int
    success_count: int
    failure_count: int
