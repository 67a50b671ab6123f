"""
营收汇总 - 已确认收入

- 预订：checked-in / checked-out，整单 total_price 计入入住日（不按晚分摊）
- 服务订单：completed，按 ordered_at 的日期计入
"""
from decimal import Decimal
from typing import Any, FrozenSet, Iterable

from hotel_ops.domain.date_range import DateRange, DateLike, field_of, parse_date
from hotel_ops.models.ontology import ReservationStatus, ServiceOrderStatus, enum_value
from hotel_ops.services.price_service import to_money


RECOGNIZED_RESERVATION_STATUSES: FrozenSet[str] = frozenset({
    ReservationStatus.CHECKED_IN.value,
    ReservationStatus.CHECKED_OUT.value,
})

RECOGNIZED_SERVICE_ORDER_STATUSES: FrozenSet[str] = frozenset({
    ServiceOrderStatus.COMPLETED.value,
})


def amount_of(record: Any) -> Decimal:
    """记录的 total_price，未填写按 0 计"""
    value = field_of(record, "total_price", "totalPrice")
    if value is None:
        return Decimal("0")
    return to_money(value, "total_price")


class RevenueAggregator:
    """营收汇总器"""

    def room_revenue(self, reservations: Iterable[Any], window: DateRange) -> Decimal:
        total = Decimal("0")
        for reservation in reservations:
            if enum_value(field_of(reservation, "status")) not in RECOGNIZED_RESERVATION_STATUSES:
                continue
            check_in = parse_date(field_of(reservation, "check_in_date", "checkInDate"), "check_in_date")
            if window.contains(check_in):
                total += amount_of(reservation)
        return total

    def service_revenue(self, service_orders: Iterable[Any], window: DateRange) -> Decimal:
        total = Decimal("0")
        for order in service_orders:
            if enum_value(field_of(order, "status")) not in RECOGNIZED_SERVICE_ORDER_STATUSES:
                continue
            ordered_on = parse_date(field_of(order, "ordered_at", "orderedAt"), "ordered_at")
            if window.contains(ordered_on):
                total += amount_of(order)
        return total

    def calculate_revenue(self, reservations: Iterable[Any], service_orders: Iterable[Any],
                          window_start: DateLike, window_end: DateLike) -> Decimal:
        """
        计算窗口内营收（两端包含）

        Returns:
            房费收入 + 服务收入
        """
        window = DateRange.window(window_start, window_end)
        return self.room_revenue(reservations, window) + self.service_revenue(service_orders, window)
