"""
hotel_ops/engine/event_bus.py

进程内事件总线 - 发布/订阅
预订、房态、服务订单的变更流程在写入后发布事件，订阅者据此失效统计缓存。
每个应用显式持有自己的 EventBus 实例。
"""
from typing import Any, Callable, Dict, List, Optional, Tuple
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
import logging
import threading

logger = logging.getLogger(__name__)

EventHandler = Callable[["Event"], None]


class EventType(str, Enum):
    """会影响统计结果的变更事件"""
    RESERVATION_CREATED = "reservation.created"
    RESERVATION_UPDATED = "reservation.updated"
    RESERVATION_STATUS_CHANGED = "reservation.status_changed"
    SERVICE_ORDER_COMPLETED = "service_order.completed"
    ROOM_STATUS_CHANGED = "room.status_changed"


@dataclass
class Event:
    """
    事件

    Attributes:
        event_type: 事件类型（如 "reservation.created"）
        data: 事件数据，通常包含 hotel_id
        source: 触发来源（服务名）
        timestamp: 事件时间戳
    """

    event_type: str
    data: Dict[str, Any]
    source: str = ""
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class PublishResult:
    """
    事件发布结果

    Attributes:
        event_type: 事件类型
        subscriber_count: 订阅者数量
        success_count: 成功处理的处理器数量
        failure_count: 失败的处理器数量
        errors: 处理器错误列表 (handler, exception)
    """

    event_type: str
    subscriber_count: int
    success_count: int = 0
    failure_count: int = 0
    errors: List[Tuple[EventHandler, Exception]] = field(default_factory=list)


class EventBus:
    """
    事件总线

    Example:
        >>> bus = EventBus()
        >>> bus.subscribe("reservation.created", handler)
        >>> bus.publish(Event(event_type="reservation.created", data={"hotel_id": 1}))

    Thread Safety:
        订阅管理是线程安全的，处理器在发布线程中同步执行。
    """

    def __init__(self):
        self._subscribers: Dict[str, List[EventHandler]] = {}
        self._lock = threading.RLock()

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        """订阅事件"""
        event_type = _type_name(event_type)
        with self._lock:
            handlers = self._subscribers.setdefault(event_type, [])
            if handler not in handlers:
                handlers.append(handler)
                logger.info(f"Handler {_handler_name(handler)} subscribed to {event_type}")

    def unsubscribe(self, event_type: str, handler: EventHandler) -> None:
        """取消订阅"""
        event_type = _type_name(event_type)
        with self._lock:
            handlers = self._subscribers.get(event_type, [])
            if handler in handlers:
                handlers.remove(handler)
                logger.info(f"Handler {_handler_name(handler)} unsubscribed from {event_type}")

    def publish(self, event: Event) -> PublishResult:
        """
        发布事件（同步执行所有处理器）

        处理器异常不会影响其他处理器的执行，记录在返回结果中。
        """
        event_type = _type_name(event.event_type)
        with self._lock:
            handlers = list(self._subscribers.get(event_type, []))

        result = PublishResult(event_type=event_type, subscriber_count=len(handlers))
        for handler in handlers:
            try:
                handler(event)
                result.success_count += 1
            except Exception as e:
                result.failure_count += 1
                result.errors.append((handler, e))
                logger.error(
                    f"Event handler {_handler_name(handler)} error for {event_type}: {e}",
                    exc_info=True,
                )
        return result

    def get_subscribers(self, event_type: Optional[str] = None) -> Dict[str, List[str]]:
        """获取订阅者信息（用于调试）"""
        with self._lock:
            if event_type:
                event_type = _type_name(event_type)
                return {event_type: [_handler_name(h) for h in self._subscribers.get(event_type, [])]}
            return {
                et: [_handler_name(h) for h in handlers]
                for et, handlers in self._subscribers.items()
            }


def _type_name(event_type: Any) -> str:
    return event_type.value if isinstance(event_type, Enum) else str(event_type)


def _handler_name(handler: EventHandler) -> str:
    return getattr(handler, "__name__", repr(handler))
