"""
Pytest 配置和共享 fixtures
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from decimal import Decimal
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from hotel_ops.database import Base
from hotel_ops.models import ontology  # noqa
from hotel_ops.models.ontology import Hotel, RoomType
from hotel_ops.engine.event_bus import EventBus
from hotel_ops.services.dashboard_service import DashboardService
from hotel_ops.services.event_handlers import register_cache_invalidation
from hotel_ops.services.metrics_cache import MetricsCache
from hotel_ops.services.store import SqlAlchemyStore
from hotel_ops.dependencies import get_dashboard_service, get_event_bus, get_store
from hotel_ops.main import app


# ============== 数据库 Fixtures ==============

@pytest.fixture(scope="function")
def db_engine():
    """创建内存数据库引擎"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture(scope="function")
def db_session(session_factory):
    """创建数据库会话"""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def store(session_factory):
    return SqlAlchemyStore(session_factory)


@pytest.fixture
def dashboard_service(store):
    return DashboardService(store, MetricsCache())


@pytest.fixture
def event_bus(dashboard_service):
    """接好缓存失效处理器的事件总线"""
    bus = EventBus()
    register_cache_invalidation(bus, dashboard_service)
    return bus


@pytest.fixture(scope="function")
def client(store, dashboard_service, event_bus):
    """创建测试客户端"""
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_dashboard_service] = lambda: dashboard_service
    app.dependency_overrides[get_event_bus] = lambda: event_bus
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ============== 实体相关 Fixtures ==============

@pytest.fixture
def sample_hotel(db_session):
    """创建测试酒店"""
    hotel = Hotel(name="Test Hotel", currency="VND", tax_rate=Decimal("10"))
    db_session.add(hotel)
    db_session.commit()
    db_session.refresh(hotel)
    return hotel


@pytest.fixture
def sample_room_type(db_session, sample_hotel):
    """创建带星期/季节价格的房型"""
    room_type = RoomType(
        hotel_id=sample_hotel.id,
        name="Deluxe",
        base_price=Decimal("500000"),
        capacity=2,
        weekday_pricing={"friday": 800000, "saturday": 950000},
        seasonal_pricing=[
            {"start_date": "2025-12-20", "end_date": "2025-12-31", "price": 2200000},
        ],
    )
    db_session.add(room_type)
    db_session.commit()
    db_session.refresh(room_type)
    return room_type


class CountingStore:
    """
    内存存储适配器，记录每个集合的读取次数

    fail_with 不为 None 时所有读取都抛出该异常；before_read 在每次读取前回调。
    """

    def __init__(self):
        self.hotels = []
        self.rooms = []
        self.room_types = []
        self.reservations = []
        self.service_orders = []
        self.calls = {"hotels": 0, "rooms": 0, "room_types": 0, "reservations": 0, "service_orders": 0}
        self.fail_with = None
        self.before_read = None

    def _hit(self, collection):
        self.calls[collection] += 1
        if self.before_read is not None:
            self.before_read(collection)
        if self.fail_with is not None:
            raise self.fail_with

    def get_hotel(self, hotel_id):
        self._hit("hotels")
        return next((h for h in self.hotels if h.id == hotel_id), None)

    def list_rooms(self, hotel_id):
        self._hit("rooms")
        return [r for r in self.rooms if r.hotel_id == hotel_id]

    def list_room_types(self, hotel_id):
        self._hit("room_types")
        return [rt for rt in self.room_types if rt.hotel_id == hotel_id]

    def get_room_type(self, room_type_id):
        self._hit("room_types")
        return next((rt for rt in self.room_types if rt.id == room_type_id), None)

    def list_reservations(self, hotel_id, statuses=None):
        self._hit("reservations")
        wanted = None if statuses is None else set(statuses)
        return [
            r for r in self.reservations
            if r.hotel_id == hotel_id and (wanted is None or r.status in wanted)
        ]

    def list_service_orders(self, hotel_id, status=None):
        self._hit("service_orders")
        return [
            o for o in self.service_orders
            if o.hotel_id == hotel_id and (status is None or o.status == status)
        ]


@pytest.fixture
def counting_store():
    """可计数的内存存储"""
    return CountingStore()
