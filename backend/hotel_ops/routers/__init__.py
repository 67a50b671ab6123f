# API Routers
from hotel_ops.routers import dashboard, events, prices, reports

__all__ = ['dashboard', 'events', 'prices', 'reports']
