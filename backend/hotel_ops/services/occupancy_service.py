"""
入住率计算 - 以间夜为单位

occupied_room_nights / (total_rooms × 窗口天数) × 100
只有 confirmed / checked-in 的预订占用房间；结果总是落在 [0, 100]。
"""
from datetime import date
from typing import Any, FrozenSet, Iterable, Optional
import logging

from hotel_ops.domain.date_range import DateRange, DateLike, field_of, parse_date
from hotel_ops.errors import ValidationError
from hotel_ops.models.ontology import ReservationStatus, enum_value

logger = logging.getLogger(__name__)

OCCUPYING_STATUSES: FrozenSet[str] = frozenset({
    ReservationStatus.CONFIRMED.value,
    ReservationStatus.CHECKED_IN.value,
})

# 日报表把已退房的历史在住也计入
REPORTED_STATUSES: FrozenSet[str] = OCCUPYING_STATUSES | {ReservationStatus.CHECKED_OUT.value}


def reservation_stay(reservation: Any) -> Optional[DateRange]:
    """
    预订的住宿区间 [check_in, check_out)

    离店日期不晚于入住日期的脏数据返回 None，不计入任何间夜。
    """
    check_in = parse_date(field_of(reservation, "check_in_date", "checkInDate"), "check_in_date")
    check_out = parse_date(field_of(reservation, "check_out_date", "checkOutDate"), "check_out_date")
    if check_out <= check_in:
        return None
    return DateRange(check_in, check_out, False)


class OccupancyCalculator:
    """入住率计算器"""

    def __init__(self, occupying_statuses: Iterable[str] = OCCUPYING_STATUSES):
        self.occupying_statuses = frozenset(occupying_statuses)

    def _occupies(self, reservation: Any) -> bool:
        return enum_value(field_of(reservation, "status")) in self.occupying_statuses

    def occupied_room_nights(self, reservations: Iterable[Any], window: DateRange) -> int:
        """窗口内被占用的间夜数（按窗口截取）"""
        total = 0
        for reservation in reservations:
            if not self._occupies(reservation):
                continue
            stay = reservation_stay(reservation)
            if stay is None:
                continue
            total += stay.overlap_days(window)
        return total

    def calculate_occupancy(self, total_rooms: int, reservations: Iterable[Any],
                            window_start: DateLike, window_end: DateLike) -> float:
        """
        计算窗口内入住率（百分比）

        Args:
            total_rooms: 房间总数
            reservations: 预订记录
            window_start: 窗口开始日（包含）
            window_end: 窗口结束日（包含）

        Returns:
            [0, 100] 之间的百分比；total_rooms 为 0 时返回 0
        """
        if total_rooms < 0:
            raise ValidationError(f"房间总数不能为负: {total_rooms}", {"field": "total_rooms"})

        window = DateRange.window(window_start, window_end)
        if total_rooms == 0:
            return 0.0

        occupied = self.occupied_room_nights(reservations, window)
        total_room_nights = total_rooms * window.days
        rate = occupied * 100.0 / total_room_nights

        if rate > 100.0:
            # 重复排房或脏数据
            logger.warning(
                f"Occupancy {rate:.2f}% exceeds 100% for window {window} "
                f"({occupied}/{total_room_nights} room-nights), capping"
            )
            return 100.0
        return rate

    def count_occupied_rooms(self, reservations: Iterable[Any], on_date: date) -> int:
        """某一天被占用的房间数，按 room_id 去重"""
        occupied_rooms = set()
        for reservation in reservations:
            if not self._occupies(reservation):
                continue
            stay = reservation_stay(reservation)
            if stay is not None and stay.contains(on_date):
                occupied_rooms.add(field_of(reservation, "room_id", "roomId"))
        return len(occupied_rooms)
