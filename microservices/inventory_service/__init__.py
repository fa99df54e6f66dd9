"""
Inventory Service

Kitchen inventory microservice providing:
- Inventory items with purchase/expiry dates and shelf-life defaults
- Expiry and low-stock indicators
- Consumption and waste logging with atomic stock depletion
- Flat-average consumption forecasts
- Sharing of surplus items between parties
- Dashboard counts and waste reports

Port: 8260
"""

__version__ = "1.0.0"
__service__ = "inventory_service"
