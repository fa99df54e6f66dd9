"""
Inventory Service Data Models

Pydantic models for kitchen inventory items, depletion events (consumption
and waste), sharing requests and the derived dashboard/report views.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ====================
# Enum Types
# ====================

class ItemUnit(str, Enum):
    """Unit of measure"""
    KG = "kg"
    G = "g"
    L = "l"
    ML = "ml"
    PCS = "pcs"
    BOX = "box"
    PACK = "pack"


class ItemCategory(str, Enum):
    """Food category"""
    DAIRY = "dairy"
    MEAT = "meat"
    SEAFOOD = "seafood"
    PRODUCE = "produce"
    BAKERY = "bakery"
    GROCERY = "grocery"
    FROZEN = "frozen"
    PREPARED = "prepared"
    BEVERAGE = "beverage"
    OTHER = "other"


class WasteReason(str, Enum):
    """Why an item was thrown away"""
    EXPIRED = "expired"
    SPOILED = "spoiled"
    OVERPRODUCTION = "overproduction"
    DAMAGED = "damaged"
    QUALITY = "quality"
    OTHER = "other"


class SharingStatus(str, Enum):
    """Sharing request status"""
    REQUESTED = "requested"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class ExpiryStatus(str, Enum):
    """Freshness bucket derived from days until expiry"""
    EXPIRED = "expired"
    CRITICAL = "critical"
    WARNING = "warning"
    NORMAL = "normal"


class ItemFilter(str, Enum):
    """Inventory list filters"""
    ALL = "all"
    EXPIRING = "expiring"
    SHARING = "sharing"


class UserRole(str, Enum):
    """Caller role"""
    ADMIN = "admin"
    USER = "user"


# ====================
# Store Query Types
# ====================

class FilterOp(str, Enum):
    """Document store predicate operators"""
    EQ = "=="
    NE = "!="
    LT = "<"
    LTE = "<="
    GT = ">"
    GTE = ">="


class QueryFilter(NamedTuple):
    """Single predicate on a document field"""
    field: str
    op: FilterOp
    value: Any


# ====================
# Core Data Models
# ====================

class InventoryItem(BaseModel):
    """Inventory item entity model"""
    item_id: str = Field(..., description="Unique item ID")
    name: str = Field(..., min_length=1)
    quantity: float = Field(..., ge=0, allow_inf_nan=False)
    unit: ItemUnit
    category: ItemCategory
    purchase_date: date
    expiry_date: date
    notes: Optional[str] = None
    sharing_available: bool = False

    owner_id: Optional[str] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "InventoryItem":
        data = dict(document)
        return cls(item_id=data.pop("id"), **data)


class ConsumptionEvent(BaseModel):
    """Consumption log entry (append-only)"""
    model_config = ConfigDict(frozen=True)

    event_id: str
    item_id: str
    item_name: str
    unit: ItemUnit
    quantity: float = Field(..., gt=0)
    consumption_date: date
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "ConsumptionEvent":
        data = dict(document)
        data.pop("updated_at", None)
        return cls(event_id=data.pop("id"), **data)


class WasteEvent(BaseModel):
    """Waste log entry (append-only)"""
    model_config = ConfigDict(frozen=True)

    event_id: str
    item_id: str
    item_name: str
    unit: ItemUnit
    quantity: float = Field(..., gt=0)
    reason: WasteReason
    disposal_date: date
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "WasteEvent":
        data = dict(document)
        data.pop("updated_at", None)
        return cls(event_id=data.pop("id"), **data)


class SharingRequest(BaseModel):
    """Request for another party's shared item"""
    model_config = ConfigDict(frozen=True)

    request_id: str
    item_id: str
    item_name: str
    quantity: float
    unit: ItemUnit
    expiry_date: date
    status: SharingStatus = SharingStatus.REQUESTED
    requester_id: str
    requester_name: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "SharingRequest":
        data = dict(document)
        data.pop("updated_at", None)
        return cls(request_id=data.pop("id"), **data)


class Identity(BaseModel):
    """Caller identity resolved by the gateway"""
    user_id: str = Field(..., min_length=1)
    role: UserRole = UserRole.USER
    email: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def display_name(self) -> str:
        return self.email or self.user_id


# ====================
# Request Models
# ====================

class InventoryItemCreateRequest(BaseModel):
    """Create inventory item request"""
    name: str = Field(..., min_length=1, max_length=255)
    quantity: float = Field(..., ge=0, allow_inf_nan=False)
    unit: ItemUnit
    category: ItemCategory
    purchase_date: Optional[date] = None
    expiry_date: Optional[date] = None
    notes: Optional[str] = None
    sharing_available: bool = False

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name must not be blank")
        return v.strip()


class InventoryItemUpdateRequest(BaseModel):
    """Partial update of an inventory item"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    quantity: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    unit: Optional[ItemUnit] = None
    category: Optional[ItemCategory] = None
    purchase_date: Optional[date] = None
    expiry_date: Optional[date] = None
    notes: Optional[str] = None
    sharing_available: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("name must not be blank")
        return v.strip() if v is not None else v


class ConsumptionRecordRequest(BaseModel):
    """Log consumption of an item"""
    item_id: str
    quantity: float = Field(..., allow_inf_nan=False)
    consumption_date: Optional[date] = None
    notes: Optional[str] = None


class WasteRecordRequest(BaseModel):
    """Log waste of an item"""
    item_id: str
    quantity: float = Field(..., allow_inf_nan=False)
    reason: WasteReason
    disposal_date: Optional[date] = None
    notes: Optional[str] = None


class SharingRequestCreateRequest(BaseModel):
    """Request a shared item"""
    item_id: str
    notes: Optional[str] = None


# ====================
# Derived Views
# ====================

class InventoryItemView(InventoryItem):
    """Inventory item with freshness and stock indicators"""
    days_until_expiry: int
    expiry_status: ExpiryStatus
    is_low_stock: bool


class DailyQuantity(BaseModel):
    """Quantity total for one calendar day"""
    day: date
    quantity: float


class ItemForecast(BaseModel):
    """Last-7-days actuals and next-7-days flat prediction for one item"""
    item_id: str
    item_name: str
    unit: ItemUnit
    history_days: int = Field(..., description="Distinct days with consumption in the window")
    historical: List[DailyQuantity]
    predicted: List[DailyQuantity]


class DashboardSummary(BaseModel):
    """Counts shown on the dashboard"""
    inventory_count: int
    waste_count: int
    expiring_count: int
    low_stock_count: int
    expiring_items: List[InventoryItemView] = Field(default_factory=list)
    low_stock_items: List[InventoryItemView] = Field(default_factory=list)


class WasteBreakdown(BaseModel):
    """Waste totals by reason over a trailing window"""
    window_days: int
    total_waste: float
    by_reason: Dict[WasteReason, float]


class UsageReport(BaseModel):
    """Waste vs. consumption over a trailing window"""
    window_days: int
    inventory_count: int
    total_waste: float
    total_consumption: float
    waste_percentage: float
    by_reason: Dict[WasteReason, float]


# ====================
# Response Models
# ====================

class InventoryItemListResponse(BaseModel):
    items: List[InventoryItemView]
    total: int
    filter: ItemFilter


class ConsumptionListResponse(BaseModel):
    events: List[ConsumptionEvent]
    total: int


class WasteListResponse(BaseModel):
    events: List[WasteEvent]
    total: int


class SharingItemListResponse(BaseModel):
    items: List[InventoryItem]
    total: int


class SharingRequestListResponse(BaseModel):
    requests: List[SharingRequest]
    total: int


class OperationResponse(BaseModel):
    success: bool
    message: str


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    service: str
    port: int
    version: str
    dependencies: Dict[str, str] = Field(default_factory=dict)


class ServiceInfo(BaseModel):
    """Service information"""
    service: str
    version: str
    description: str
    capabilities: List[str]
