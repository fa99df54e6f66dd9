"""
Inventory Service Routes Registry

Defines service metadata and routes exposed on /info.
"""

SERVICE_METADATA = {
    "service_name": "inventory_service",
    "version": "1.0.0",
    "tags": ['inventory', 'kitchen', 'v1'],
    "capabilities": [
        'inventory_management',
        'expiry_tracking',
        'consumption_logging',
        'waste_logging',
        'consumption_forecast',
        'item_sharing',
        'waste_reports',
    ],
}

ROUTES = [
    {"path": "/health", "methods": ["GET"], "description": "Health check"},
    {"path": "/api/v1/inventory/health", "methods": ["GET"], "description": "Service health check (API v1)"},
    {"path": "/info", "methods": ["GET"], "description": "Service information"},
    {"path": "/api/v1/inventory/items", "methods": ["GET", "POST"], "description": "List / create inventory items"},
    {"path": "/api/v1/inventory/items/{item_id}", "methods": ["GET", "PATCH", "DELETE"], "description": "Read / update / delete an item"},
    {"path": "/api/v1/inventory/items/{item_id}/forecast", "methods": ["GET"], "description": "Consumption forecast for an item"},
    {"path": "/api/v1/inventory/consumption", "methods": ["GET", "POST"], "description": "Consumption log"},
    {"path": "/api/v1/inventory/waste", "methods": ["GET", "POST"], "description": "Waste log"},
    {"path": "/api/v1/inventory/sharing/available", "methods": ["GET"], "description": "Items available for sharing"},
    {"path": "/api/v1/inventory/sharing/mine", "methods": ["GET"], "description": "Caller's shared items"},
    {"path": "/api/v1/inventory/sharing/requests", "methods": ["GET", "POST"], "description": "Caller's sharing requests"},
    {"path": "/api/v1/inventory/admin/sharing/requests", "methods": ["GET"], "description": "All sharing requests (admin)"},
    {"path": "/api/v1/inventory/dashboard", "methods": ["GET"], "description": "Dashboard summary"},
    {"path": "/api/v1/inventory/reports/waste", "methods": ["GET"], "description": "Waste breakdown by reason"},
    {"path": "/api/v1/inventory/reports/usage", "methods": ["GET"], "description": "Waste vs. consumption report"},
]


def get_routes_metadata():
    """Get route metadata summary"""
    return {
        "route_count": str(len(ROUTES)),
        "routes": ",".join([r["path"] for r in ROUTES]),
        "api_version": "v1",
        "base_path": "/api/v1/inventory",
    }


__all__ = ["SERVICE_METADATA", "ROUTES", "get_routes_metadata"]
