"""
酒店运营分析服务入口
"""
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hotel_ops import __version__
from hotel_ops.config import settings
from hotel_ops.database import SessionLocal, init_db
from hotel_ops.engine.event_bus import EventBus
from hotel_ops.routers import dashboard, events, prices, reports
from hotel_ops.services.dashboard_service import DashboardService
from hotel_ops.services.event_handlers import register_cache_invalidation
from hotel_ops.services.metrics_cache import MetricsCache
from hotel_ops.services.store import SqlAlchemyStore

logger = logging.getLogger(__name__)


def build_dashboard_service(store) -> DashboardService:
    """按配置构建仪表盘服务"""
    cache = None
    if settings.METRICS_CACHE_ENABLED:
        cache = MetricsCache(
            lock_timeout=settings.METRICS_CACHE_LOCK_TIMEOUT,
            wait_timeout=settings.METRICS_INFLIGHT_WAIT_TIMEOUT,
        )
    return DashboardService(store, cache)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    init_db()

    store = SqlAlchemyStore(SessionLocal)
    dashboard_service = build_dashboard_service(store)
    event_bus = EventBus()
    register_cache_invalidation(event_bus, dashboard_service)

    app.state.store = store
    app.state.dashboard_service = dashboard_service
    app.state.event_bus = event_bus
    logger.info(f"{settings.APP_NAME} started (metrics cache {'on' if settings.METRICS_CACHE_ENABLED else 'off'})")

    yield

    dashboard_service.clear_all_cache()


# 创建应用
app = FastAPI(
    title=settings.APP_NAME,
    description="房价解析、入住率与营收统计",
    version=__version__,
    lifespan=lifespan
)

# CORS 配置
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # 生产环境应限制具体域名
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 注册路由
app.include_router(dashboard.router)
app.include_router(events.router)
app.include_router(prices.router)
app.include_router(reports.router)


@app.get("/health")
def health_check():
    """健康检查"""
    return {"status": "healthy"}
