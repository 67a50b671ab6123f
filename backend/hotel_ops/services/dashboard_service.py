"""
仪表盘服务 - 统计门面

组合入住率、营收和房态统计为一个结果对象，先查缓存。
存储读取失败时抛出 MetricsUnavailableError，绝不返回归零或部分数据。
"""
from collections import Counter
from datetime import date
from typing import Any, Callable, List, Optional, Tuple
import logging

from hotel_ops.domain.date_range import field_of, month_start, parse_date, week_start
from hotel_ops.errors import CacheCoordinationError, HotelNotFoundError, MetricsUnavailableError
from hotel_ops.models.ontology import (
    ReservationStatus, RoomStatus, ServiceOrderStatus, enum_value
)
from hotel_ops.models.schemas import DashboardMetrics
from hotel_ops.services.metrics_cache import MetricsCache
from hotel_ops.services.occupancy_service import OccupancyCalculator
from hotel_ops.services.revenue_service import RevenueAggregator
from hotel_ops.services.store import MetricsStore

logger = logging.getLogger(__name__)

ARRIVAL_STATUSES = frozenset({ReservationStatus.PENDING.value, ReservationStatus.CONFIRMED.value})
DEPARTURE_STATUSES = frozenset({ReservationStatus.CHECKED_IN.value})


class DashboardService:
    """
    仪表盘服务

    显式构造并注入存储适配器和缓存，由调用方持有引用，不使用全局单例。

    Example:
        >>> service = DashboardService(SqlAlchemyStore(SessionLocal), MetricsCache())
        >>> metrics = service.get_dashboard_metrics(hotel_id=1)
        >>> service.clear_cache(1)
    """

    def __init__(
        self,
        store: MetricsStore,
        cache: Optional[MetricsCache] = None,
        occupancy: Optional[OccupancyCalculator] = None,
        revenue: Optional[RevenueAggregator] = None,
        clock: Callable[[], date] = date.today,
    ):
        """
        Args:
            store: 只读存储适配器
            cache: 结果缓存，None 表示不缓存
            occupancy: 入住率计算器
            revenue: 营收汇总器
            clock: 返回"今天"的函数
        """
        self._store = store
        self._cache = cache
        self._occupancy = occupancy or OccupancyCalculator()
        self._revenue = revenue or RevenueAggregator()
        self._clock = clock

    @property
    def cache(self) -> Optional[MetricsCache]:
        return self._cache

    def get_dashboard_metrics(self, hotel_id: int) -> DashboardMetrics:
        """获取酒店仪表盘统计"""
        if self._cache is None:
            return self._compute(hotel_id)

        try:
            return self._cache.get_or_compute(hotel_id, lambda: self._compute(hotel_id))
        except CacheCoordinationError as e:
            logger.warning(f"Metrics cache unavailable for hotel {hotel_id} ({e}), computing directly")
            return self._compute(hotel_id)

    def clear_cache(self, hotel_id: int) -> None:
        """
        清除单个酒店的缓存

        Raises:
            CacheCoordinationError: 缓存锁被占用超时，缓存未清除
        """
        if self._cache is not None:
            self._cache.invalidate(hotel_id)

    def clear_all_cache(self) -> None:
        """清除所有缓存"""
        if self._cache is not None:
            self._cache.invalidate_all()

    def _load_snapshot(self, hotel_id: int) -> Tuple[List[Any], List[Any], List[Any]]:
        """
        读取房间、预订、已完成服务订单快照

        Raises:
            MetricsUnavailableError: 存储读取失败
            HotelNotFoundError: 酒店不存在（在写缓存之前抛出）
        """
        try:
            hotel = self._store.get_hotel(hotel_id)
            if hotel is not None:
                rooms = self._store.list_rooms(hotel_id)
                reservations = self._store.list_reservations(hotel_id)
                service_orders = self._store.list_service_orders(
                    hotel_id, status=ServiceOrderStatus.COMPLETED.value
                )
        except Exception as e:
            logger.error(f"Error loading dashboard data for hotel {hotel_id}: {e}")
            raise MetricsUnavailableError(
                "Failed to fetch dashboard metrics", {"hotel_id": hotel_id}
            ) from e
        if hotel is None:
            raise HotelNotFoundError(f"酒店不存在: {hotel_id}", {"hotel_id": hotel_id})
        return list(rooms), list(reservations), list(service_orders)

    def _compute(self, hotel_id: int) -> DashboardMetrics:
        today = self._clock()
        rooms, reservations, service_orders = self._load_snapshot(hotel_id)

        # 房态统计
        status_counts = Counter(enum_value(field_of(room, "status")) for room in rooms)
        room_status_counts = {status.value: status_counts.get(status.value, 0) for status in RoomStatus}
        for status, count in status_counts.items():
            room_status_counts.setdefault(str(status), count)
        total_rooms = len(rooms)

        # 入住率：今天、本周一至今天
        occupancy_today = self._occupancy.calculate_occupancy(total_rooms, reservations, today, today)
        occupancy_this_week = self._occupancy.calculate_occupancy(
            total_rooms, reservations, week_start(today), today
        )

        # 营收：今天、本月一日至今天
        revenue_today = self._revenue.calculate_revenue(reservations, service_orders, today, today)
        revenue_this_month = self._revenue.calculate_revenue(
            reservations, service_orders, month_start(today), today
        )

        # 今日预抵/预离
        check_ins_today = 0
        check_outs_today = 0
        for reservation in reservations:
            status = enum_value(field_of(reservation, "status"))
            if status in ARRIVAL_STATUSES and _date_of(reservation, "check_in_date", "checkInDate") == today:
                check_ins_today += 1
            if status in DEPARTURE_STATUSES and _date_of(reservation, "check_out_date", "checkOutDate") == today:
                check_outs_today += 1

        metrics = DashboardMetrics(
            hotel_id=hotel_id,
            as_of=today,
            occupancy_today=occupancy_today,
            occupancy_this_week=occupancy_this_week,
            revenue_today=revenue_today,
            revenue_this_month=revenue_this_month,
            check_ins_today=check_ins_today,
            check_outs_today=check_outs_today,
            room_status_counts=room_status_counts,
            dirty_rooms_count=room_status_counts[RoomStatus.DIRTY.value],
            maintenance_rooms_count=room_status_counts[RoomStatus.MAINTENANCE.value],
            total_rooms=total_rooms,
            occupied_rooms=room_status_counts[RoomStatus.OCCUPIED.value],
            available_rooms=room_status_counts[RoomStatus.VACANT.value],
        )
        logger.info(
            f"Dashboard metrics for hotel {hotel_id} as of {today}: "
            f"occupancy {occupancy_today:.1f}%, revenue {revenue_today}"
        )
        return metrics


def _date_of(record: Any, *names: str) -> date:
    return parse_date(field_of(record, *names), names[0])
