"""
事件处理器 - 变更事件驱动的统计缓存失效
"""
from typing import List
import logging

from hotel_ops.engine.event_bus import Event, EventBus, EventType
from hotel_ops.services.dashboard_service import DashboardService

logger = logging.getLogger(__name__)

INVALIDATING_EVENTS = (
    EventType.RESERVATION_CREATED,
    EventType.RESERVATION_UPDATED,
    EventType.RESERVATION_STATUS_CHANGED,
    EventType.SERVICE_ORDER_COMPLETED,
    EventType.ROOM_STATUS_CHANGED,
)


class CacheInvalidationHandlers:
    """把变更事件转成仪表盘缓存失效"""

    def __init__(self, dashboard_service: DashboardService):
        self._dashboard_service = dashboard_service
        self._registered: List[EventType] = []

    def handle_metrics_changed(self, event: Event) -> None:
        """
        处理会改变统计结果的事件

        事件数据带 hotel_id 时只失效该酒店，否则全部失效。
        """
        hotel_id = event.data.get("hotel_id")
        if hotel_id is None:
            logger.warning(f"{event.event_type} event without hotel_id, clearing all metrics cache")
            self._dashboard_service.clear_all_cache()
            return
        self._dashboard_service.clear_cache(hotel_id)

    def register(self, bus: EventBus) -> None:
        """注册到事件总线"""
        for event_type in INVALIDATING_EVENTS:
            bus.subscribe(event_type, self.handle_metrics_changed)
            self._registered.append(event_type)
        logger.info(f"Cache invalidation handlers registered for {len(self._registered)} event types")

    def unregister(self, bus: EventBus) -> None:
        for event_type in self._registered:
            bus.unsubscribe(event_type, self.handle_metrics_changed)
        self._registered.clear()


def register_cache_invalidation(bus: EventBus, dashboard_service: DashboardService) -> CacheInvalidationHandlers:
    """创建并注册缓存失效处理器"""
    handlers = CacheInvalidationHandlers(dashboard_service)
    handlers.register(bus)
    return handlers
