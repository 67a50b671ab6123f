# Ontology Models
from hotel_ops.models.ontology import (
    Hotel, RoomType, Room, Reservation, ServiceOrder,
    RoomStatus, ReservationStatus, ServiceOrderStatus
)

__all__ = [
    'Hotel', 'RoomType', 'Room', 'Reservation', 'ServiceOrder',
    'RoomStatus', 'ReservationStatus', 'ServiceOrderStatus'
]
