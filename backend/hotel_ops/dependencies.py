"""
依赖注入：应用级组件在启动时构建并挂在 app.state 上
"""
from fastapi import Depends, Request

from hotel_ops.engine.event_bus import EventBus
from hotel_ops.services.dashboard_service import DashboardService
from hotel_ops.services.price_service import PriceService
from hotel_ops.services.report_service import ReportService
from hotel_ops.services.store import MetricsStore


def get_store(request: Request) -> MetricsStore:
    return request.app.state.store


def get_dashboard_service(request: Request) -> DashboardService:
    return request.app.state.dashboard_service


def get_report_service(store: MetricsStore = Depends(get_store)) -> ReportService:
    return ReportService(store)


def get_price_service() -> PriceService:
    return PriceService()


def get_event_bus(request: Request) -> EventBus:
    return request.app.state.event_bus
