"""
仪表盘路由
"""
from fastapi import APIRouter, Depends, HTTPException, status
from hotel_ops.dependencies import get_dashboard_service
from hotel_ops.errors import CacheCoordinationError, HotelNotFoundError, MetricsUnavailableError
from hotel_ops.models.schemas import DashboardMetrics
from hotel_ops.services.dashboard_service import DashboardService

router = APIRouter(prefix="/dashboard", tags=["仪表盘"])


@router.get("/{hotel_id}/metrics", response_model=DashboardMetrics)
def get_dashboard_metrics(
    hotel_id: int,
    service: DashboardService = Depends(get_dashboard_service)
):
    """获取仪表盘数据"""
    try:
        return service.get_dashboard_metrics(hotel_id)
    except HotelNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except MetricsUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)


@router.delete("/cache", status_code=status.HTTP_204_NO_CONTENT)
def clear_all_cache(service: DashboardService = Depends(get_dashboard_service)):
    """清除所有酒店的统计缓存"""
    try:
        service.clear_all_cache()
    except CacheCoordinationError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)


@router.delete("/{hotel_id}/cache", status_code=status.HTTP_204_NO_CONTENT)
def clear_cache(
    hotel_id: int,
    service: DashboardService = Depends(get_dashboard_service)
):
    """清除单个酒店的统计缓存"""
    try:
        service.clear_cache(hotel_id)
    except CacheCoordinationError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)
