"""
Tests for hotel_ops/services/report_service.py
Covers: generate_occupancy_report, get_occupancy_summary, generate_revenue_report,
        generate_reservation_report, unknown hotels
"""
import pytest
from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace

from hotel_ops.errors import HotelNotFoundError, MetricsUnavailableError, ValidationError
from hotel_ops.services.report_service import ReportService


# ── helpers ──────────────────────────────────────────────────────────

def _reservation(room_id, check_in, check_out, status, hotel_id=1, **extra):
    return SimpleNamespace(
        hotel_id=hotel_id,
        room_id=room_id,
        check_in_date=check_in,
        check_out_date=check_out,
        status=status,
        **extra,
    )


def _checked_out(room_type_id, checked_out_at, total_price, status="checked-out"):
    return _reservation(
        None, date(2025, 2, 1), date(2025, 2, 2), status,
        room_type_id=room_type_id, checked_out_at=checked_out_at, total_price=total_price,
    )


def _booking(created_at, source, status):
    """入住日期远离统计区间，只有创建时间决定是否计入"""
    return _reservation(None, date(2025, 6, 1), date(2025, 6, 2), status, created_at=created_at, source=source)


def _order(service_id, service_name, completed_at, total_price, status="completed"):
    return SimpleNamespace(
        hotel_id=1,
        service_id=service_id,
        service_name=service_name,
        completed_at=completed_at,
        total_price=total_price,
        status=status,
    )


@pytest.fixture
def hotel_store(counting_store):
    """只有 1 号酒店、没有任何业务数据的存储"""
    counting_store.hotels = [SimpleNamespace(id=1)]
    return counting_store


@pytest.fixture
def occupancy_store(hotel_store):
    hotel_store.rooms = [SimpleNamespace(id=i, hotel_id=1, status="vacant") for i in range(1, 5)]
    hotel_store.reservations = [
        _reservation(1, date(2025, 3, 1), date(2025, 3, 3), "checked-out"),
        _reservation(2, date(2025, 3, 2), date(2025, 3, 4), "confirmed"),
        _reservation(2, date(2025, 3, 2), date(2025, 3, 3), "checked-in"),
        _reservation(3, date(2025, 3, 1), date(2025, 3, 5), "cancelled"),
        _reservation(4, date(2025, 3, 1), date(2025, 3, 5), "pending"),
    ]
    return hotel_store


@pytest.fixture
def revenue_store(hotel_store):
    hotel_store.room_types = [
        SimpleNamespace(id=1, hotel_id=1, name="Deluxe"),
        SimpleNamespace(id=2, hotel_id=1, name="Suite"),
    ]
    hotel_store.reservations = [
        _checked_out(1, datetime(2025, 3, 3, 14, 0), Decimal("1000000")),
        _checked_out(1, datetime(2025, 3, 4, 11, 0), Decimal("500000.50")),
        _checked_out(2, datetime(2025, 3, 2, 12, 0), Decimal("2000000")),
        _checked_out(99, datetime(2025, 3, 3, 9, 0), Decimal("300000")),
        _checked_out(1, datetime(2025, 3, 10, 9, 0), Decimal("777")),
        _checked_out(1, None, Decimal("888")),
        _checked_out(1, datetime(2025, 3, 3, 9, 0), Decimal("999"), status="checked-in"),
    ]
    hotel_store.service_orders = [
        _order(10, "Laundry", datetime(2025, 3, 2, 9, 0), Decimal("120000")),
        _order(10, "Laundry", datetime(2025, 3, 4, 9, 0), Decimal("30000.25")),
        _order(11, "Spa", datetime(2025, 3, 3, 9, 0), Decimal("400000")),
        _order(11, "Spa", datetime(2025, 3, 9, 9, 0), Decimal("400000")),
        _order(12, "Minibar", datetime(2025, 3, 3, 9, 0), Decimal("50000"), status="pending"),
    ]
    return hotel_store


@pytest.fixture
def reservation_store(hotel_store):
    hotel_store.reservations = [
        _booking(datetime(2025, 3, 1, 10, 0), "direct", "confirmed"),
        _booking(datetime(2025, 3, 1, 12, 0), "booking.com", "cancelled"),
        _booking(datetime(2025, 3, 2, 9, 0), "direct", "no-show"),
        _booking(datetime(2025, 3, 3, 8, 0), None, "checked-out"),
        _booking(datetime(2025, 3, 3, 9, 0), "direct", "cancelled"),
        _booking(datetime(2025, 3, 3, 23, 0), "expedia", "confirmed"),
        _booking(datetime(2025, 2, 28, 23, 0), "direct", "cancelled"),
        _booking(None, "direct", "cancelled"),
    ]
    return hotel_store


# ── tests ────────────────────────────────────────────────────────────

class TestOccupancyReport:

    def test_daily_rows(self, occupancy_store):
        """每天一行，同一房间只计一次"""
        rows = ReportService(occupancy_store).generate_occupancy_report(1, "2025-03-01", "2025-03-04")

        assert [row.date for row in rows] == [
            date(2025, 3, 1), date(2025, 3, 2), date(2025, 3, 3), date(2025, 3, 4)
        ]
        assert [row.occupied_rooms for row in rows] == [1, 2, 1, 0]
        assert [row.occupancy_percentage for row in rows] == [25.0, 50.0, 25.0, 0.0]
        assert all(row.total_rooms == 4 for row in rows)

    def test_percentage_rounded_to_two_decimals(self, hotel_store):
        hotel_store.rooms = [SimpleNamespace(id=i, hotel_id=1) for i in range(1, 4)]
        hotel_store.reservations = [_reservation(1, date(2025, 3, 1), date(2025, 3, 2), "confirmed")]

        rows = ReportService(hotel_store).generate_occupancy_report(1, "2025-03-01", "2025-03-01")

        assert rows[0].occupancy_percentage == 33.33

    def test_no_rooms_returns_empty(self, hotel_store):
        assert ReportService(hotel_store).generate_occupancy_report(1, "2025-03-01", "2025-03-04") == []
        assert hotel_store.calls["reservations"] == 0

    def test_inverted_range_rejected(self, occupancy_store):
        with pytest.raises(ValidationError):
            ReportService(occupancy_store).generate_occupancy_report(1, "2025-03-04", "2025-03-01")

    def test_summary(self, occupancy_store):
        summary = ReportService(occupancy_store).get_occupancy_summary(1, "2025-03-01", "2025-03-04")

        assert summary.average_occupancy == 25.0
        assert summary.max_occupancy == 50.0
        assert summary.min_occupancy == 0.0
        assert summary.total_days == 4

    def test_summary_without_rooms(self, hotel_store):
        summary = ReportService(hotel_store).get_occupancy_summary(1, "2025-03-01", "2025-03-04")

        assert summary.total_days == 0
        assert summary.average_occupancy == 0


class TestRevenueReport:

    def test_totals(self, revenue_store):
        report = ReportService(revenue_store).generate_revenue_report(1, "2025-03-01", "2025-03-05")

        assert report.room_revenue == Decimal("3800000.50")
        assert report.service_revenue == Decimal("550000.25")
        assert report.total_revenue == Decimal("4350000.75")

    def test_by_room_type_sorted_by_revenue(self, revenue_store):
        report = ReportService(revenue_store).generate_revenue_report(1, "2025-03-01", "2025-03-05")

        assert [(r.room_type_name, r.revenue, r.reservation_count) for r in report.revenue_by_room_type] == [
            ("Suite", Decimal("2000000.00"), 1),
            ("Deluxe", Decimal("1500000.50"), 2),
            ("Unknown Room Type", Decimal("300000.00"), 1),
        ]

    def test_by_service_sorted_by_revenue(self, revenue_store):
        report = ReportService(revenue_store).generate_revenue_report(1, "2025-03-01", "2025-03-05")

        assert [(s.service_name, s.revenue, s.order_count) for s in report.revenue_by_service] == [
            ("Spa", Decimal("400000.00"), 1),
            ("Laundry", Decimal("150000.25"), 2),
        ]

    def test_empty_range(self, revenue_store):
        report = ReportService(revenue_store).generate_revenue_report(1, "2024-01-01", "2024-01-31")

        assert report.total_revenue == Decimal("0")
        assert report.revenue_by_room_type == []
        assert report.revenue_by_service == []


class TestStoreFailures:

    def test_occupancy_report_raises_metrics_unavailable(self, occupancy_store):
        occupancy_store.fail_with = RuntimeError("timeout")

        with pytest.raises(MetricsUnavailableError) as exc:
            ReportService(occupancy_store).generate_occupancy_report(1, "2025-03-01", "2025-03-04")
        assert isinstance(exc.value.__cause__, RuntimeError)

    def test_revenue_report_raises_metrics_unavailable(self, revenue_store):
        revenue_store.fail_with = RuntimeError("timeout")

        with pytest.raises(MetricsUnavailableError):
            ReportService(revenue_store).generate_revenue_report(1, "2025-03-01", "2025-03-05")


class TestReservationReport:

    def test_bookings_by_source(self, reservation_store):
        """按创建日期计入，渠道映射为显示名，按数量倒序"""
        report = ReportService(reservation_store).generate_reservation_report(1, "2025-03-01", "2025-03-03")

        assert report.bookings_by_source[0].source == "Direct Booking"
        assert report.bookings_by_source[0].count == 3
        assert report.bookings_by_source[0].percentage == 50.0
        assert sorted((s.source, s.count, s.percentage) for s in report.bookings_by_source[1:]) == [
            ("Booking.com", 1, 16.67),
            ("Unknown", 1, 16.67),
            ("expedia", 1, 16.67),
        ]

    def test_cancellations_grouped_by_creation_date(self, reservation_store):
        report = ReportService(reservation_store).generate_reservation_report(1, "2025-03-01", "2025-03-03")

        assert [(c.date, c.cancelled, c.no_shows, c.total) for c in report.cancellations_and_no_shows] == [
            (date(2025, 3, 1), 1, 0, 1),
            (date(2025, 3, 2), 0, 1, 1),
            (date(2025, 3, 3), 1, 0, 1),
        ]

    def test_summary_rates_rounded_to_two_decimals(self, reservation_store):
        summary = ReportService(reservation_store).generate_reservation_report(
            1, "2025-03-01", "2025-03-03"
        ).summary

        assert summary.total_bookings == 6
        assert summary.total_cancellations == 2
        assert summary.total_no_shows == 1
        assert summary.cancellation_rate == 33.33
        assert summary.no_show_rate == 16.67

    def test_no_bookings_gives_zero_rates(self, reservation_store):
        report = ReportService(reservation_store).generate_reservation_report(1, "2024-01-01", "2024-01-31")

        assert report.bookings_by_source == []
        assert report.cancellations_and_no_shows == []
        assert report.summary.total_bookings == 0
        assert report.summary.cancellation_rate == 0
        assert report.summary.no_show_rate == 0

    def test_store_failure_raises_metrics_unavailable(self, reservation_store):
        reservation_store.fail_with = RuntimeError("timeout")

        with pytest.raises(MetricsUnavailableError):
            ReportService(reservation_store).generate_reservation_report(1, "2025-03-01", "2025-03-03")


class TestUnknownHotel:

    @pytest.mark.parametrize("method", [
        "generate_occupancy_report",
        "get_occupancy_summary",
        "generate_revenue_report",
        "generate_reservation_report",
    ])
    def test_raises_not_found(self, occupancy_store, method):
        with pytest.raises(HotelNotFoundError) as exc:
            getattr(ReportService(occupancy_store), method)(999, "2025-03-01", "2025-03-04")

        assert exc.value.context == {"hotel_id": 999}
        assert occupancy_store.calls["rooms"] == 0
        assert occupancy_store.calls["reservations"] == 0
