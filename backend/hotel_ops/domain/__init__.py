from hotel_ops.domain.date_range import DateRange, parse_date, week_start, month_start

__all__ = ['DateRange', 'parse_date', 'week_start', 'month_start']
