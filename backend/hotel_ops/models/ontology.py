"""
本体对象定义 (Ontology Objects)
引擎读取的五类记录：酒店、房型、房间、预订、服务订单
所有记录都按 hotel_id 归属租户，引擎不跨租户查询
"""
from datetime import datetime
from enum import Enum
from typing import Any
from sqlalchemy import (
    Column, Integer, String, DateTime, Date, JSON,
    ForeignKey, Text, Enum as SQLEnum, Numeric
)
from sqlalchemy.orm import relationship
from hotel_ops.database import Base


# ============== 枚举定义 ==============

class RoomStatus(str, Enum):
    """房间状态枚举"""
    VACANT = "vacant"            # 空闲
    OCCUPIED = "occupied"        # 入住中
    DIRTY = "dirty"              # 待清洁
    MAINTENANCE = "maintenance"  # 维修中


class ReservationStatus(str, Enum):
    """预订状态枚举"""
    PENDING = "pending"          # 待确认
    CONFIRMED = "confirmed"      # 已确认
    CHECKED_IN = "checked-in"    # 已入住
    CHECKED_OUT = "checked-out"  # 已退房
    CANCELLED = "cancelled"      # 已取消
    NO_SHOW = "no-show"          # 未到店


class ServiceOrderStatus(str, Enum):
    """服务订单状态"""
    PENDING = "pending"          # 待处理
    COMPLETED = "completed"      # 已完成
    CANCELLED = "cancelled"      # 已取消


def enum_value(value: Any) -> Any:
    """取枚举的原始值，普通字符串原样返回"""
    return value.value if isinstance(value, Enum) else value


# ============== 本体对象定义 ==============

class Hotel(Base):
    """
    酒店对象 - 租户根
    货币属于酒店，金额字段本身不带币种
    """
    __tablename__ = "hotels"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)               # 酒店名称
    currency = Column(String(3), default="USD")               # 币种
    tax_rate = Column(Numeric(5, 2), default=0)               # 税率(百分比)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    room_types = relationship("RoomType", back_populates="hotel")
    rooms = relationship("Room", back_populates="hotel")


class RoomType(Base):
    """
    房型对象
    weekday_pricing: {"friday": 950000, ...}
    seasonal_pricing: [{"start_date": "2025-12-20", "end_date": "2025-12-31", "price": 2200000}, ...]
    """
    __tablename__ = "room_types"

    id = Column(Integer, primary_key=True, index=True)
    hotel_id = Column(Integer, ForeignKey("hotels.id"), nullable=False, index=True)
    name = Column(String(50), nullable=False)                 # 房型名称
    description = Column(Text)                                # 描述
    base_price = Column(Numeric(12, 2), nullable=False)       # 基础价格
    capacity = Column(Integer, default=2)                     # 最大入住人数
    weekday_pricing = Column(JSON)                            # 星期价格覆盖
    seasonal_pricing = Column(JSON)                           # 季节价格区间(按声明顺序)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    hotel = relationship("Hotel", back_populates="room_types")
    rooms = relationship("Room", back_populates="room_type")


class Room(Base):
    """房间对象 - 状态由前台/客房流程维护，引擎只读"""
    __tablename__ = "rooms"

    id = Column(Integer, primary_key=True, index=True)
    hotel_id = Column(Integer, ForeignKey("hotels.id"), nullable=False, index=True)
    room_number = Column(String(10), nullable=False)          # 房间号
    room_type_id = Column(Integer, ForeignKey("room_types.id"), nullable=False)
    floor = Column(Integer, nullable=False)                   # 楼层
    status = Column(SQLEnum(RoomStatus), default=RoomStatus.VACANT)
    notes = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    hotel = relationship("Hotel", back_populates="rooms")
    room_type = relationship("RoomType", back_populates="rooms")


class Reservation(Base):
    """
    预订对象
    check_out_date 不计入住晚数；total_price 在创建/修改时由定价服务算出后持久化
    """
    __tablename__ = "reservations"

    id = Column(Integer, primary_key=True, index=True)
    hotel_id = Column(Integer, ForeignKey("hotels.id"), nullable=False, index=True)
    confirmation_number = Column(String(20))                  # 确认号
    room_id = Column(Integer, ForeignKey("rooms.id"))
    room_type_id = Column(Integer, ForeignKey("room_types.id"), nullable=False)
    check_in_date = Column(Date, nullable=False)              # 入住日期
    check_out_date = Column(Date, nullable=False)             # 离店日期
    number_of_guests = Column(Integer, default=1)             # 入住人数
    source = Column(String(20), default="direct")            # 预订渠道
    status = Column(SQLEnum(ReservationStatus), default=ReservationStatus.PENDING)
    total_price = Column(Numeric(12, 2), default=0)           # 房费总价
    paid_amount = Column(Numeric(12, 2), default=0)           # 已付金额
    checked_in_at = Column(DateTime)                          # 实际入住时间
    checked_out_at = Column(DateTime)                         # 实际退房时间
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    room = relationship("Room")
    room_type = relationship("RoomType")
    service_orders = relationship("ServiceOrder", back_populates="reservation")


class ServiceOrder(Base):
    """服务订单对象 - 附加消费"""
    __tablename__ = "service_orders"

    id = Column(Integer, primary_key=True, index=True)
    hotel_id = Column(Integer, ForeignKey("hotels.id"), nullable=False, index=True)
    reservation_id = Column(Integer, ForeignKey("reservations.id"))
    service_id = Column(Integer)                              # 服务项目ID
    service_name = Column(String(100))                        # 服务项目名称
    quantity = Column(Integer, default=1)
    unit_price = Column(Numeric(12, 2), default=0)
    total_price = Column(Numeric(12, 2), default=0)
    status = Column(SQLEnum(ServiceOrderStatus), default=ServiceOrderStatus.PENDING)
    ordered_at = Column(DateTime, default=datetime.utcnow)    # 下单时间
    completed_at = Column(DateTime)                           # 完成时间

    reservation = relationship("Reservation", back_populates="service_orders")
