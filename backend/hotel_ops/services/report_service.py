"""
报表服务 - 按日期区间的经营统计
"""
from collections import defaultdict
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Callable, Dict, List, Optional, TypeVar
import logging

from hotel_ops.domain.date_range import DateRange, DateLike, field_of, parse_date
from hotel_ops.errors import HotelNotFoundError, MetricsUnavailableError
from hotel_ops.models.ontology import ReservationStatus, ServiceOrderStatus, enum_value
from hotel_ops.models.schemas import (
    BookingsBySource, CancellationsByDate, OccupancyReportRow, OccupancySummary, ReservationReport,
    ReservationSummary, RevenueByRoomType, RevenueByService, RevenueReport
)
from hotel_ops.services.occupancy_service import REPORTED_STATUSES, OccupancyCalculator
from hotel_ops.services.revenue_service import amount_of
from hotel_ops.services.store import MetricsStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

CENT = Decimal("0.01")

# 预订渠道显示名，未列出的原样返回
SOURCE_NAMES = {
    "direct": "Direct Booking",
    "booking.com": "Booking.com",
    "airbnb": "Airbnb",
    "phone": "Phone",
    "walk-in": "Walk-in",
    "other": "Other",
    "unknown": "Unknown",
}


def _round2(value: float) -> float:
    return round(value * 100) / 100


def _money2(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def _percent(part: int, whole: int) -> float:
    return _round2(part * 100.0 / whole) if whole else 0.0


def _date_or_none(value: Any) -> Optional[date]:
    return parse_date(value) if value is not None else None


class ReportService:
    """报表服务"""

    def __init__(self, store: MetricsStore):
        self.store = store
        self._occupancy = OccupancyCalculator(REPORTED_STATUSES)

    def _read(self, what: str, hotel_id: int, loader: Callable[[], T]) -> T:
        try:
            return loader()
        except Exception as e:
            logger.error(f"Error generating {what} for hotel {hotel_id}: {e}")
            raise MetricsUnavailableError(f"Failed to generate {what}", {"hotel_id": hotel_id}) from e

    def _require_hotel(self, what: str, hotel_id: int) -> None:
        if self._read(what, hotel_id, lambda: self.store.get_hotel(hotel_id)) is None:
            raise HotelNotFoundError(f"酒店不存在: {hotel_id}", {"hotel_id": hotel_id})

    def generate_occupancy_report(self, hotel_id: int, start_date: DateLike,
                                  end_date: DateLike) -> List[OccupancyReportRow]:
        """获取入住率日报表，房间按 room_id 去重"""
        window = DateRange.window(start_date, end_date)
        self._require_hotel("occupancy report", hotel_id)
        rooms = self._read("occupancy report", hotel_id, lambda: self.store.list_rooms(hotel_id))
        total_rooms = len(rooms)
        if total_rooms == 0:
            return []

        reservations = self._read(
            "occupancy report", hotel_id,
            lambda: self.store.list_reservations(hotel_id, statuses=sorted(REPORTED_STATUSES)),
        )

        result = []
        for day in window.iter_days():
            occupied = self._occupancy.count_occupied_rooms(reservations, day)
            result.append(OccupancyReportRow(
                date=day,
                total_rooms=total_rooms,
                occupied_rooms=occupied,
                occupancy_percentage=_round2(min(occupied * 100.0 / total_rooms, 100.0)),
            ))
        return result

    def get_occupancy_summary(self, hotel_id: int, start_date: DateLike,
                              end_date: DateLike) -> OccupancySummary:
        """入住率汇总：平均、最高、最低"""
        rows = self.generate_occupancy_report(hotel_id, start_date, end_date)
        if not rows:
            return OccupancySummary(average_occupancy=0, max_occupancy=0, min_occupancy=0, total_days=0)

        percentages = [row.occupancy_percentage for row in rows]
        return OccupancySummary(
            average_occupancy=_round2(sum(percentages) / len(percentages)),
            max_occupancy=_round2(max(percentages)),
            min_occupancy=_round2(min(percentages)),
            total_days=len(rows),
        )

    def generate_revenue_report(self, hotel_id: int, start_date: DateLike,
                                end_date: DateLike) -> RevenueReport:
        """
        获取营收报表

        预订按实际退房时间、服务订单按完成时间落入区间统计。
        """
        self._require_hotel("revenue report", hotel_id)
        window = DateRange.window(start_date, end_date)

        def load():
            return (
                self.store.list_reservations(hotel_id, statuses=[ReservationStatus.CHECKED_OUT.value]),
                self.store.list_service_orders(hotel_id, status=ServiceOrderStatus.COMPLETED.value),
                self.store.list_room_types(hotel_id),
            )

        reservations, service_orders, room_types = self._read("revenue report", hotel_id, load)
        room_type_names = {field_of(rt, "id"): field_of(rt, "name") for rt in room_types}

        by_room_type: Dict[Any, List[Decimal]] = defaultdict(list)
        for reservation in reservations:
            checked_out = _date_or_none(field_of(reservation, "checked_out_at", "checkedOutAt"))
            if checked_out is None or not window.contains(checked_out):
                continue
            by_room_type[field_of(reservation, "room_type_id", "roomTypeId")].append(amount_of(reservation))

        by_service: Dict[Any, List[Decimal]] = defaultdict(list)
        service_names: Dict[Any, str] = {}
        for order in service_orders:
            completed = _date_or_none(field_of(order, "completed_at", "completedAt"))
            if completed is None or not window.contains(completed):
                continue
            service_id = field_of(order, "service_id", "serviceId")
            by_service[service_id].append(amount_of(order))
            service_names.setdefault(service_id, field_of(order, "service_name", "serviceName"))

        revenue_by_room_type = sorted(
            (
                RevenueByRoomType(
                    room_type_id=room_type_id,
                    room_type_name=room_type_names.get(room_type_id) or "Unknown Room Type",
                    revenue=_money2(sum(amounts, Decimal("0"))),
                    reservation_count=len(amounts),
                )
                for room_type_id, amounts in by_room_type.items()
            ),
            key=lambda item: item.revenue,
            reverse=True,
        )
        revenue_by_service = sorted(
            (
                RevenueByService(
                    service_id=service_id,
                    service_name=service_names.get(service_id) or "Unknown Service",
                    revenue=_money2(sum(amounts, Decimal("0"))),
                    order_count=len(amounts),
                )
                for service_id, amounts in by_service.items()
            ),
            key=lambda item: item.revenue,
            reverse=True,
        )

        room_revenue = sum((sum(a, Decimal("0")) for a in by_room_type.values()), Decimal("0"))
        service_revenue = sum((sum(a, Decimal("0")) for a in by_service.values()), Decimal("0"))

        return RevenueReport(
            total_revenue=_money2(room_revenue + service_revenue),
            room_revenue=_money2(room_revenue),
            service_revenue=_money2(service_revenue),
            revenue_by_room_type=revenue_by_room_type,
            revenue_by_service=revenue_by_service,
        )

    def generate_reservation_report(self, hotel_id: int, start_date: DateLike,
                                    end_date: DateLike) -> ReservationReport:
        """
        获取预订报表

        按预订创建日期落入区间统计，与入住日期无关。
        渠道为空计为 unknown；取消率、未到店率为百分比，无预订时为 0。
        """
        window = DateRange.window(start_date, end_date)
        self._require_hotel("reservation report", hotel_id)
        reservations = self._read(
            "reservation report", hotel_id, lambda: self.store.list_reservations(hotel_id)
        )

        created = []
        for reservation in reservations:
            created_on = _date_or_none(field_of(reservation, "created_at", "createdAt"))
            if created_on is not None and window.contains(created_on):
                created.append((created_on, reservation))
        total = len(created)

        source_counts: Dict[str, int] = defaultdict(int)
        by_date: Dict[date, Dict[str, int]] = defaultdict(lambda: {"cancelled": 0, "no_shows": 0})
        total_cancellations = 0
        total_no_shows = 0
        for created_on, reservation in created:
            source_counts[field_of(reservation, "source") or "unknown"] += 1
            status = enum_value(field_of(reservation, "status"))
            if status == ReservationStatus.CANCELLED.value:
                by_date[created_on]["cancelled"] += 1
                total_cancellations += 1
            elif status == ReservationStatus.NO_SHOW.value:
                by_date[created_on]["no_shows"] += 1
                total_no_shows += 1

        bookings_by_source = sorted(
            (
                BookingsBySource(
                    source=SOURCE_NAMES.get(source, source),
                    count=count,
                    percentage=_percent(count, total),
                )
                for source, count in source_counts.items()
            ),
            key=lambda item: item.count,
            reverse=True,
        )
        cancellations_and_no_shows = [
            CancellationsByDate(
                date=day,
                cancelled=counts["cancelled"],
                no_shows=counts["no_shows"],
                total=counts["cancelled"] + counts["no_shows"],
            )
            for day, counts in sorted(by_date.items())
        ]

        return ReservationReport(
            bookings_by_source=bookings_by_source,
            cancellations_and_no_shows=cancellations_and_no_shows,
            summary=ReservationSummary(
                total_bookings=total,
                total_cancellations=total_cancellations,
                total_no_shows=total_no_shows,
                cancellation_rate=_percent(total_cancellations, total),
                no_show_rate=_percent(total_no_shows, total),
            ),
        )
