"""
报表路由
"""
from datetime import date, timedelta
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query, status
from hotel_ops.dependencies import get_report_service
from hotel_ops.errors import HotelNotFoundError, MetricsUnavailableError, ValidationError
from hotel_ops.models.schemas import OccupancyReportRow, OccupancySummary, ReservationReport, RevenueReport
from hotel_ops.services.report_service import ReportService

router = APIRouter(prefix="/reports", tags=["统计报表"])


def _run(fn, *args):
    try:
        return fn(*args)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except HotelNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except MetricsUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)


@router.get("/{hotel_id}/occupancy", response_model=List[OccupancyReportRow])
def get_occupancy_report(
    hotel_id: int,
    start_date: date = Query(default_factory=lambda: date.today() - timedelta(days=7)),
    end_date: date = Query(default_factory=date.today),
    service: ReportService = Depends(get_report_service)
):
    """获取入住率报表"""
    return _run(service.generate_occupancy_report, hotel_id, start_date, end_date)


@router.get("/{hotel_id}/occupancy/summary", response_model=OccupancySummary)
def get_occupancy_summary(
    hotel_id: int,
    start_date: date = Query(default_factory=lambda: date.today() - timedelta(days=7)),
    end_date: date = Query(default_factory=date.today),
    service: ReportService = Depends(get_report_service)
):
    """获取入住率汇总"""
    return _run(service.get_occupancy_summary, hotel_id, start_date, end_date)


@router.get("/{hotel_id}/revenue", response_model=RevenueReport)
def get_revenue_report(
    hotel_id: int,
    start_date: date = Query(default_factory=lambda: date.today() - timedelta(days=7)),
    end_date: date = Query(default_factory=date.today),
    service: ReportService = Depends(get_report_service)
):
    """获取营收报表"""
    return _run(service.generate_revenue_report, hotel_id, start_date, end_date)


@router.get("/{hotel_id}/reservations", response_model=ReservationReport)
def get_reservation_report(
    hotel_id: int,
    start_date: date = Query(default_factory=lambda: date.today() - timedelta(days=7)),
    end_date: date = Query(default_factory=date.today),
    service: ReportService = Depends(get_report_service)
):
    """获取预订报表（按预订创建日期统计）"""
    return _run(service.generate_reservation_report, hotel_id, start_date, end_date)
