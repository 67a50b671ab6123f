# Business Services
from hotel_ops.services.price_service import PriceService
from hotel_ops.services.occupancy_service import OccupancyCalculator
from hotel_ops.services.revenue_service import RevenueAggregator
from hotel_ops.services.metrics_cache import MetricsCache
from hotel_ops.services.store import MetricsStore, SqlAlchemyStore
from hotel_ops.services.dashboard_service import DashboardService
from hotel_ops.services.report_service import ReportService

__all__ = [
    'PriceService', 'OccupancyCalculator', 'RevenueAggregator',
    'MetricsCache', 'MetricsStore', 'SqlAlchemyStore',
    'DashboardService', 'ReportService'
]
