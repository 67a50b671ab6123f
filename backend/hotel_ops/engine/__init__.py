from hotel_ops.engine.event_bus import Event, EventBus, EventType, PublishResult

__all__ = ['Event', 'EventBus', 'EventType', 'PublishResult']
