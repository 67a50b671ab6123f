"""
外部存储适配器 - 只读

引擎通过这里读取租户范围内的完整快照，不分页。
SqlAlchemyStore 每次读取独立开关会话，适合被进程级的 DashboardService 长期持有。
"""
from contextlib import contextmanager
from typing import Callable, Iterable, Iterator, List, Optional, Protocol
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hotel_ops.database import SessionLocal
from hotel_ops.errors import StoreReadError
from hotel_ops.models.ontology import (
    Hotel, Room, RoomType, Reservation, ReservationStatus,
    ServiceOrder, ServiceOrderStatus,
)

logger = logging.getLogger(__name__)


class MetricsStore(Protocol):
    """引擎依赖的只读集合"""

    def get_hotel(self, hotel_id: int) -> Optional[Hotel]:
        ...

    def list_rooms(self, hotel_id: int) -> List[Room]:
        ...

    def list_room_types(self, hotel_id: int) -> List[RoomType]:
        ...

    def get_room_type(self, room_type_id: int) -> Optional[RoomType]:
        ...

    def list_reservations(self, hotel_id: int,
                          statuses: Optional[Iterable[str]] = None) -> List[Reservation]:
        ...

    def list_service_orders(self, hotel_id: int,
                            status: Optional[str] = None) -> List[ServiceOrder]:
        ...


class SqlAlchemyStore:
    """基于 SQLAlchemy 会话的存储适配器"""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self._session_factory = session_factory

    @contextmanager
    def _session(self, collection: str) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
        except SQLAlchemyError as e:
            logger.error(f"Failed to read {collection}: {e}")
            raise StoreReadError(f"读取 {collection} 失败", {"collection": collection}) from e
        finally:
            db.close()

    def get_hotel(self, hotel_id: int) -> Optional[Hotel]:
        with self._session("hotels") as db:
            return db.query(Hotel).filter(Hotel.id == hotel_id).first()

    def list_rooms(self, hotel_id: int) -> List[Room]:
        with self._session("rooms") as db:
            return db.query(Room).filter(Room.hotel_id == hotel_id).all()

    def list_room_types(self, hotel_id: int) -> List[RoomType]:
        with self._session("room_types") as db:
            return db.query(RoomType).filter(RoomType.hotel_id == hotel_id).all()

    def get_room_type(self, room_type_id: int) -> Optional[RoomType]:
        with self._session("room_types") as db:
            return db.query(RoomType).filter(RoomType.id == room_type_id).first()

    def list_reservations(self, hotel_id: int,
                          statuses: Optional[Iterable[str]] = None) -> List[Reservation]:
        with self._session("reservations") as db:
            query = db.query(Reservation).filter(Reservation.hotel_id == hotel_id)
            if statuses is not None:
                query = query.filter(Reservation.status.in_(
                    [ReservationStatus(s) for s in statuses]
                ))
            return query.all()

    def list_service_orders(self, hotel_id: int,
                            status: Optional[str] = None) -> List[ServiceOrder]:
        with self._session("service_orders") as db:
            query = db.query(ServiceOrder).filter(ServiceOrder.hotel_id == hotel_id)
            if status is not None:
                query = query.filter(ServiceOrder.status == ServiceOrderStatus(status))
            return query.all()
