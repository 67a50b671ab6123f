"""
事件路由 - 外部变更流程通知统计引擎
"""
from fastapi import APIRouter, Depends, status
from hotel_ops.dependencies import get_event_bus
from hotel_ops.engine.event_bus import Event, EventBus
from hotel_ops.models.schemas import EventPublishRequest, EventPublishResponse

router = APIRouter(prefix="/events", tags=["事件"])


@router.post("", response_model=EventPublishResponse, status_code=status.HTTP_202_ACCEPTED)
def publish_event(
    request: EventPublishRequest,
    bus: EventBus = Depends(get_event_bus)
):
    """
    发布变更事件

    预订、服务订单、房态在外部写入后调用，订阅者据此失效统计缓存。
    处理器失败不影响其他处理器，只体现在 failure_count 中。
    """
    result = bus.publish(Event(
        event_type=request.event_type.value,
        data=request.data,
        source=request.source,
    ))
    return EventPublishResponse(
        event_type=result.event_type,
        subscriber_count=result.subscriber_count,
        success_count=result.success_count,
        failure_count=result.failure_count,
    )
