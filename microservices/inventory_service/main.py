"""
Inventory Service Main Application

FastAPI application for kitchen inventory management.
Port: 8260
"""

import logging
import os
import sys
import time
from contextlib import asynccontextmanager
from datetime import date
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

# Add project root to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from core.config_manager import ConfigManager
from core.logger import setup_service_logger

from .auth_dependencies import get_current_identity, require_admin
from .factory import InventoryServiceFactory
from .inventory_service import InventoryService
from .models import (
    ConsumptionEvent,
    ConsumptionListResponse,
    ConsumptionRecordRequest,
    DashboardSummary,
    HealthResponse,
    Identity,
    InventoryItemCreateRequest,
    InventoryItemListResponse,
    InventoryItemUpdateRequest,
    InventoryItemView,
    ItemFilter,
    ItemForecast,
    OperationResponse,
    ServiceInfo,
    SharingItemListResponse,
    SharingRequest,
    SharingRequestCreateRequest,
    SharingRequestListResponse,
    UsageReport,
    WasteBreakdown,
    WasteEvent,
    WasteListResponse,
    WasteRecordRequest,
)
from .protocols import (
    AuthError,
    DocumentNotFoundError,
    DocumentStoreError,
    InventoryValidationError,
    PermissionDeniedError,
)
from .routes_registry import SERVICE_METADATA, get_routes_metadata

# Service configuration
SERVICE_NAME = "inventory_service"
SERVICE_PORT = int(os.getenv("SERVICE_PORT", "8260"))
SERVICE_VERSION = SERVICE_METADATA["version"]

logger = setup_service_logger(SERVICE_NAME)

# Track startup time for uptime calculation
startup_time = time.time()

# Global factory instance
factory: Optional[InventoryServiceFactory] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    global factory

    logger.info(f"Starting {SERVICE_NAME} on port {SERVICE_PORT}")

    config = ConfigManager(SERVICE_NAME)
    config.print_config_summary()

    factory = InventoryServiceFactory(config)
    await factory.initialize()

    yield

    # Cleanup
    logger.info(f"Shutting down {SERVICE_NAME}")
    await factory.close()
    factory = None


# Create FastAPI application
app = FastAPI(
    title="Inventory Service",
    description="Kitchen inventory tracking with expiry alerts, consumption and waste logs, forecasts and sharing",
    version=SERVICE_VERSION,
    lifespan=lifespan,
)


# ====================
# Exception Handlers
# ====================


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Drop the rejected input: NaN and Infinity cannot be encoded as JSON
    errors = [{key: value for key, value in error.items() if key != "input"} for error in exc.errors()]
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_encoder(errors)},
    )


@app.exception_handler(InventoryValidationError)
async def validation_error_handler(request: Request, exc: InventoryValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc), "field": exc.field},
    )


@app.exception_handler(DocumentNotFoundError)
async def not_found_handler(request: Request, exc: DocumentNotFoundError):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": str(exc)},
    )


@app.exception_handler(DocumentStoreError)
async def store_error_handler(request: Request, exc: DocumentStoreError):
    logger.error(f"Document store failure on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": str(exc)},
    )


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError):
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"detail": str(exc)},
    )


@app.exception_handler(PermissionDeniedError)
async def permission_denied_handler(request: Request, exc: PermissionDeniedError):
    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN,
        content={"detail": str(exc)},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch-all exception handler"""
    logger.exception(f"Unhandled exception on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "type": type(exc).__name__},
    )


# ====================
# Dependencies
# ====================


def get_service() -> InventoryService:
    """Get inventory service from factory"""
    if not factory:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service not initialized",
        )
    return factory.service


# ====================
# Health Endpoints
# ====================


@app.get("/api/v1/inventory/health", response_model=HealthResponse, tags=["Health"])
@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Health check endpoint"""
    dependencies = {}

    if factory:
        try:
            store_healthy = await factory.store.health_check()
            dependencies["document_store"] = "healthy" if store_healthy else "unhealthy"
        except DocumentStoreError:
            dependencies["document_store"] = "unhealthy"
    else:
        dependencies["document_store"] = "not_initialized"

    return HealthResponse(
        status="healthy" if dependencies["document_store"] == "healthy" else "degraded",
        service=SERVICE_NAME,
        port=SERVICE_PORT,
        version=SERVICE_VERSION,
        dependencies=dependencies,
    )


@app.get("/info", response_model=ServiceInfo, tags=["Health"])
async def service_info():
    """Service information"""
    return ServiceInfo(
        service=SERVICE_NAME,
        version=SERVICE_VERSION,
        description=app.description,
        capabilities=SERVICE_METADATA["capabilities"],
    )


@app.get("/info/routes", tags=["Health"])
async def service_routes():
    """Route metadata"""
    return get_routes_metadata()


# ====================
# Inventory Endpoints
# ====================


@app.post(
    "/api/v1/inventory/items",
    response_model=InventoryItemView,
    status_code=status.HTTP_201_CREATED,
    tags=["Inventory"],
)
async def create_item(
    request: InventoryItemCreateRequest,
    service: InventoryService = Depends(get_service),
    identity: Identity = Depends(get_current_identity),
):
    """Create an inventory item; expiry date defaults from the category shelf life"""
    return await service.create_item(request, owner_id=identity.user_id)


@app.get("/api/v1/inventory/items", response_model=InventoryItemListResponse, tags=["Inventory"])
async def list_items(
    item_filter: ItemFilter = Query(ItemFilter.ALL, alias="filter", description="all, expiring or sharing"),
    days: Optional[int] = Query(None, ge=0, description="Expiring window in days"),
    service: InventoryService = Depends(get_service),
    identity: Identity = Depends(get_current_identity),
):
    """List inventory items ordered by expiry date"""
    items = await service.list_items(item_filter, days=days)
    return InventoryItemListResponse(items=items, total=len(items), filter=item_filter)


@app.get("/api/v1/inventory/items/{item_id}", response_model=InventoryItemView, tags=["Inventory"])
async def get_item(
    item_id: str,
    service: InventoryService = Depends(get_service),
    identity: Identity = Depends(get_current_identity),
):
    """Get inventory item by ID"""
    return await service.get_item(item_id)


@app.patch("/api/v1/inventory/items/{item_id}", response_model=InventoryItemView, tags=["Inventory"])
async def update_item(
    item_id: str,
    request: InventoryItemUpdateRequest,
    service: InventoryService = Depends(get_service),
    identity: Identity = Depends(get_current_identity),
):
    """Partially update an inventory item"""
    return await service.update_item(item_id, request)


@app.delete("/api/v1/inventory/items/{item_id}", response_model=OperationResponse, tags=["Inventory"])
async def delete_item(
    item_id: str,
    service: InventoryService = Depends(get_service),
    identity: Identity = Depends(get_current_identity),
):
    """Delete an inventory item"""
    await service.delete_item(item_id)
    return OperationResponse(success=True, message=f"Item {item_id} deleted")


@app.get("/api/v1/inventory/items/{item_id}/forecast", response_model=ItemForecast, tags=["Forecast"])
async def get_item_forecast(
    item_id: str,
    service: InventoryService = Depends(get_service),
    identity: Identity = Depends(get_current_identity),
):
    """Last 7 days of consumption and the next 7 days predicted"""
    return await service.get_forecast_for(item_id)


# ====================
# Consumption / Waste Endpoints
# ====================


@app.post(
    "/api/v1/inventory/consumption",
    response_model=ConsumptionEvent,
    status_code=status.HTTP_201_CREATED,
    tags=["Consumption"],
)
async def record_consumption(
    request: ConsumptionRecordRequest,
    service: InventoryService = Depends(get_service),
    identity: Identity = Depends(get_current_identity),
):
    """Log consumption and take it out of stock"""
    return await service.record_consumption(
        request.item_id, request.quantity, request.consumption_date, request.notes
    )


@app.get("/api/v1/inventory/consumption", response_model=ConsumptionListResponse, tags=["Consumption"])
async def list_consumption(
    since: Optional[date] = Query(None, description="Only events on or after this date"),
    item_id: Optional[str] = Query(None),
    service: InventoryService = Depends(get_service),
    identity: Identity = Depends(get_current_identity),
):
    """Consumption log, newest first"""
    events = await service.list_consumption(since=since, item_id=item_id)
    return ConsumptionListResponse(events=events, total=len(events))


@app.post(
    "/api/v1/inventory/waste",
    response_model=WasteEvent,
    status_code=status.HTTP_201_CREATED,
    tags=["Waste"],
)
async def record_waste(
    request: WasteRecordRequest,
    service: InventoryService = Depends(get_service),
    identity: Identity = Depends(get_current_identity),
):
    """Log waste and take it out of stock"""
    return await service.record_waste(
        request.item_id, request.quantity, request.reason, request.disposal_date, request.notes
    )


@app.get("/api/v1/inventory/waste", response_model=WasteListResponse, tags=["Waste"])
async def list_waste(
    since: Optional[date] = Query(None, description="Only events on or after this date"),
    service: InventoryService = Depends(get_service),
    identity: Identity = Depends(get_current_identity),
):
    """Waste log, newest first"""
    events = await service.list_waste(since=since)
    return WasteListResponse(events=events, total=len(events))


# ====================
# Sharing Endpoints
# ====================


@app.get("/api/v1/inventory/sharing/available", response_model=SharingItemListResponse, tags=["Sharing"])
async def list_available_items(
    service: InventoryService = Depends(get_service),
    identity: Identity = Depends(get_current_identity),
):
    """Items offered for sharing"""
    items = await service.list_available(identity.user_id)
    return SharingItemListResponse(items=items, total=len(items))


@app.get("/api/v1/inventory/sharing/mine", response_model=SharingItemListResponse, tags=["Sharing"])
async def list_my_shared_items(
    service: InventoryService = Depends(get_service),
    identity: Identity = Depends(get_current_identity),
):
    """Items the caller offers for sharing"""
    items = await service.list_shared_by(identity.user_id)
    return SharingItemListResponse(items=items, total=len(items))


@app.post(
    "/api/v1/inventory/sharing/requests",
    response_model=SharingRequest,
    status_code=status.HTTP_201_CREATED,
    tags=["Sharing"],
)
async def request_shared_item(
    request: SharingRequestCreateRequest,
    service: InventoryService = Depends(get_service),
    identity: Identity = Depends(get_current_identity),
):
    """Request a shared item"""
    return await service.request_item(request.item_id, identity, request.notes)


@app.get("/api/v1/inventory/sharing/requests", response_model=SharingRequestListResponse, tags=["Sharing"])
async def list_my_requests(
    service: InventoryService = Depends(get_service),
    identity: Identity = Depends(get_current_identity),
):
    """Sharing requests made by the caller"""
    requests = await service.list_requests(identity.user_id)
    return SharingRequestListResponse(requests=requests, total=len(requests))


@app.get(
    "/api/v1/inventory/admin/sharing/requests",
    response_model=SharingRequestListResponse,
    tags=["Admin"],
)
async def list_all_requests(
    service: InventoryService = Depends(get_service),
    identity: Identity = Depends(require_admin),
):
    """All sharing requests (administrators only)"""
    requests = await service.list_requests()
    return SharingRequestListResponse(requests=requests, total=len(requests))


# ====================
# Dashboard / Report Endpoints
# ====================


@app.get("/api/v1/inventory/dashboard", response_model=DashboardSummary, tags=["Reports"])
async def get_dashboard(
    service: InventoryService = Depends(get_service),
    identity: Identity = Depends(get_current_identity),
):
    """Inventory, waste, expiring and low-stock counts"""
    return await service.get_dashboard_summary()


@app.get("/api/v1/inventory/reports/waste", response_model=WasteBreakdown, tags=["Reports"])
async def get_waste_report(
    window_days: Optional[int] = Query(None, ge=1, le=365),
    service: InventoryService = Depends(get_service),
    identity: Identity = Depends(get_current_identity),
):
    """Waste totals by reason"""
    return await service.get_waste_breakdown(window_days)


@app.get("/api/v1/inventory/reports/usage", response_model=UsageReport, tags=["Reports"])
async def get_usage_report(
    window_days: Optional[int] = Query(None, ge=1, le=365),
    service: InventoryService = Depends(get_service),
    identity: Identity = Depends(get_current_identity),
):
    """Waste against consumption with waste percentage"""
    return await service.get_usage_report(window_days)


def main():
    """Run the service"""
    import uvicorn

    uvicorn.run(
        "microservices.inventory_service.main:app",
        host="0.0.0.0",
        port=SERVICE_PORT,
        reload=True,
        log_level="info",
    )


if __name__ == "__main__":
    main()
