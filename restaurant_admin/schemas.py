"""
Pydantic Schemas for Request/Response Validation

Grouped by area:
- Orders (admin form, status changes, views, pagination)
- POS and storefront checkout
- Deliveries, drivers and regions
- Catalog (categories, products, addons)
- Restaurant customization (info, theme, hours, payment methods)
- Dashboard and reports
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Literal, Optional, List

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from restaurant_admin.models import (
    DayOfWeek,
    DeliveryStatus,
    DriverStatus,
    OrderStatus,
    OrderType,
    PaymentStatus,
)

HHMM_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"
HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# =============================================================================
# ORDER REQUEST SCHEMAS
# =============================================================================

class OrderItemAddonInput(BaseModel):
    """Addon selected for a cart line."""
    addon_id: int
    quantity: int = Field(default=1, ge=1, le=99)


class OrderItemInput(BaseModel):
    """Single product line in an order."""
    product_id: int
    quantity: int = Field(..., ge=1, le=99, examples=[2])
    notes: Optional[str] = Field(None, max_length=500)
    addons: List[OrderItemAddonInput] = Field(default_factory=list)


class OrderCreate(BaseModel):
    """Admin order form. Also used to update an order."""

    order_type: OrderType = Field(default=OrderType.DELIVERY, examples=["delivery"])

    customer_name: str = Field(..., min_length=2, max_length=100, examples=["Maria Silva"])
    customer_phone: str = Field(..., min_length=8, max_length=20, examples=["11987654321"])

    payment_method: str = Field(..., min_length=1, max_length=50, examples=["pix"])
    notes: Optional[str] = Field(None, max_length=500)

    # Only kept for instore orders
    table_number: Optional[str] = Field(None, max_length=20)

    # Only kept for delivery orders
    delivery_address: Optional[str] = Field(None, max_length=255)
    delivery_region_id: Optional[int] = None

    items: List[OrderItemInput] = Field(..., min_length=1)


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class PaymentStatusUpdate(BaseModel):
    payment_status: PaymentStatus


# =============================================================================
# ORDER RESPONSE SCHEMAS
# =============================================================================

class CustomerView(BaseModel):
    name: str
    phone: str


class DriverView(ORMModel):
    id: int
    name: str
    phone: str
    vehicle: Optional[str] = None
    status: DriverStatus


class RegionView(ORMModel):
    id: int
    name: str
    fee: float


class OrderItemAddonView(BaseModel):
    id: int
    addon_id: Optional[int]
    name: str
    quantity: int
    unit_price: float
    total_price: float


class OrderItemView(BaseModel):
    id: int
    product_id: Optional[int]
    product_name: str
    quantity: int
    unit_price: float
    total_price: float
    notes: Optional[str] = None
    addons: List[OrderItemAddonView] = []


class OrderView(BaseModel):
    """Order as shown by the dashboards, with the customer embedded."""
    id: int
    number: Optional[str]
    order_type: OrderType
    customer: CustomerView
    status: OrderStatus
    status_label: str
    payment_method: str
    payment_status: PaymentStatus
    subtotal: float
    delivery_fee: float
    discount: float
    total: float
    notes: Optional[str] = None
    table_number: Optional[str] = None
    delivery_address: Optional[str] = None
    delivery_status: Optional[DeliveryStatus] = None
    region: Optional[RegionView] = None
    driver: Optional[DriverView] = None
    delivery_started_at: Optional[datetime] = None
    delivery_completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: List[OrderItemView] = []
    allowed_actions: List[OrderStatus] = []
    payment_actions: List[PaymentStatus] = []


class PageMeta(BaseModel):
    """Pagination fields shared by every paginated listing."""
    total_count: int
    total_pages: int
    current_page: int
    has_next_page: bool
    has_previous_page: bool


class PaginatedOrders(PageMeta):
    orders: List[OrderView]


class PaginatedDeliveries(PageMeta):
    deliveries: List[OrderView]


class KanbanBoard(BaseModel):
    pending: List[OrderView]
    preparing: List[OrderView]
    ready: List[OrderView]


class OrderNotification(BaseModel):
    id: str
    order_id: int
    title: str
    message: str
    created_at: Optional[datetime] = None


# =============================================================================
# POS / STOREFRONT CHECKOUT
# =============================================================================

class PosCheckout(BaseModel):
    """Counter sale. The cart is validated by the service, not here."""
    items: List[OrderItemInput] = Field(default_factory=list)
    payment_method_id: Optional[int] = None
    tax_percentage: float = Field(default=0.0, ge=0, le=100)
    discount: float = Field(default=0.0, ge=0)
    notes: Optional[str] = Field(None, max_length=500)


class PosCheckoutResponse(BaseModel):
    success: bool = True
    order_id: int
    number: str
    subtotal: float
    tax: float
    discount: float
    total: float


class CheckoutAddress(BaseModel):
    street: str = Field(..., min_length=1, max_length=150)
    number: str = Field(..., min_length=1, max_length=20)
    complement: Optional[str] = Field(None, max_length=100)
    neighborhood: Optional[str] = Field(None, max_length=100)
    zip_code: Optional[str] = Field(None, max_length=10)


class StorefrontCheckout(BaseModel):
    """Customer order placed from the public menu."""
    customer_name: str = Field(..., min_length=2, max_length=100)
    customer_phone: str = Field(..., min_length=8, max_length=20)
    order_type: OrderType = OrderType.DELIVERY
    payment_method: str = Field(..., min_length=1, max_length=50)
    address: Optional[CheckoutAddress] = None
    table_number: Optional[str] = Field(None, max_length=20)
    notes: Optional[str] = Field(None, max_length=500)
    items: List[OrderItemInput] = Field(default_factory=list)

    @model_validator(mode="after")
    def require_delivery_address(self):
        if self.order_type == OrderType.DELIVERY and self.address is None:
            raise ValueError("Delivery orders require an address")
        return self


class CheckoutResponse(BaseModel):
    success: bool = True
    message: str
    order_id: int
    number: str
    total: float
    estimated_time: datetime


class ActiveOrderView(BaseModel):
    id: int
    number: Optional[str]
    status: OrderStatus
    status_label: str


class TrackedOrder(BaseModel):
    order: OrderView
    payment_method_name: str
    progress: int
    is_active: bool


# =============================================================================
# MENU
# =============================================================================

class AddonView(ORMModel):
    id: int
    name: str
    description: Optional[str] = None
    price: float
    available: bool
    is_global: bool
    max_options: Optional[int] = None


class MenuProduct(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    price: float
    image_url: Optional[str] = None
    featured: bool = False
    addons: List[AddonView] = []


class MenuCategory(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    products: List[MenuProduct] = []


# =============================================================================
# DRIVERS / REGIONS / DELIVERY ACTIONS
# =============================================================================

class RegionSelect(BaseModel):
    region_id: int


class DriverAssign(BaseModel):
    driver_id: int


class DriverCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    phone: str = Field(..., min_length=8, max_length=20)
    vehicle: Optional[str] = Field(None, max_length=100)
    status: DriverStatus = DriverStatus.ACTIVE


class DriverUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    phone: Optional[str] = Field(None, min_length=8, max_length=20)
    vehicle: Optional[str] = Field(None, max_length=100)
    status: Optional[DriverStatus] = None


class RegionCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    fee: float = Field(default=0.0, ge=0)


class RegionUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    fee: Optional[float] = Field(None, ge=0)


# =============================================================================
# CATALOG
# =============================================================================

class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=500)
    display_order: Optional[int] = Field(None, ge=0)


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=500)
    display_order: Optional[int] = Field(None, ge=0)


class CategoryView(ORMModel):
    id: int
    name: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    display_order: int


class CategoryMove(BaseModel):
    direction: Literal["up", "down"]


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    image_url: Optional[str] = Field(None, max_length=500)
    category_id: Optional[int] = None
    available: bool = True
    featured: bool = False
    addon_ids: List[int] = Field(default_factory=list)


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    image_url: Optional[str] = Field(None, max_length=500)
    category_id: Optional[int] = None
    available: Optional[bool] = None
    featured: Optional[bool] = None
    # None keeps the current relations, a list replaces them
    addon_ids: Optional[List[int]] = None


class ProductView(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    price: float
    image_url: Optional[str] = None
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    available: bool
    featured: bool
    addon_ids: List[int] = []


class AddonCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    price: float = Field(default=0.0, ge=0)
    available: bool = True
    is_global: bool = False
    max_options: Optional[int] = Field(None, ge=1)


class AddonUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    available: Optional[bool] = None
    is_global: Optional[bool] = None
    max_options: Optional[int] = Field(None, ge=1)


# =============================================================================
# RESTAURANT CUSTOMIZATION
# =============================================================================

class RestaurantInfoUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    description: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = Field(None, max_length=255)


class DeliverySettingsUpdate(BaseModel):
    delivery_fee: Optional[float] = Field(None, ge=0)
    min_order_value: Optional[float] = Field(None, ge=0)


class ThemeSettings(BaseModel):
    """Stored as JSON on the restaurant row using camelCase keys."""
    model_config = ConfigDict(populate_by_name=True)

    primary_color: str = Field(default="#FF9800", alias="primaryColor", pattern=HEX_COLOR_PATTERN)
    secondary_color: Optional[str] = Field(None, alias="secondaryColor", pattern=HEX_COLOR_PATTERN)
    accent_color: Optional[str] = Field(None, alias="accentColor", pattern=HEX_COLOR_PATTERN)
    favicon_url: Optional[str] = Field(None, alias="faviconUrl")


class VisualIdentityUpdate(BaseModel):
    logo_url: Optional[str] = None
    theme: ThemeSettings


class ImagesUpdate(BaseModel):
    banner_url: Optional[str] = None
    logo_url: Optional[str] = None
    favicon_url: Optional[str] = None


class ImageKind(str, Enum):
    BANNER = "banner"
    LOGO = "logo"
    FAVICON = "favicon"


class ImageUploadResponse(BaseModel):
    success: bool = True
    kind: ImageKind
    url: str


class RestaurantView(ORMModel):
    id: int
    name: str
    description: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    logo_url: Optional[str] = None
    banner_url: Optional[str] = None
    delivery_fee: Optional[float] = None
    min_order_value: Optional[float] = None
    theme_settings: Optional[dict[str, Any]] = None


class BusinessHourView(ORMModel):
    id: int
    day_of_week: DayOfWeek
    open_time: str
    close_time: str
    is_closed: bool


class BusinessHourUpdate(BaseModel):
    day_of_week: DayOfWeek
    open_time: str = Field(..., pattern=HHMM_PATTERN, examples=["09:00"])
    close_time: str = Field(..., pattern=HHMM_PATTERN, examples=["18:00"])
    is_closed: bool = False


class BusinessHoursUpdate(BaseModel):
    hours: List[BusinessHourUpdate] = Field(..., min_length=1)


class HoursPreset(str, Enum):
    COMMERCIAL = "commercial"
    EXTENDED = "extended"
    NIGHT = "night"
    LATE_NIGHT = "late_night"
    FULL_DAY = "full_day"


class DeliveryTimeCreate(BaseModel):
    min_time: int = Field(..., ge=0, le=600)
    max_time: int = Field(..., ge=0, le=600)
    day_of_week: Optional[DayOfWeek] = None

    @model_validator(mode="after")
    def check_window(self):
        if self.max_time < self.min_time:
            raise ValueError("max_time must be greater than or equal to min_time")
        return self


class DeliveryTimeView(ORMModel):
    id: int
    min_time: int
    max_time: int
    day_of_week: Optional[DayOfWeek] = None


class DeliveryWindow(BaseModel):
    min_time: int
    max_time: int


class RestaurantStatus(BaseModel):
    restaurant: Optional[RestaurantView]
    is_open: bool
    today_hours: Optional[str]
    business_days: str
    delivery_time: DeliveryWindow


class PaymentMethodCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    icon: Optional[str] = Field(None, max_length=50)
    enabled: bool = True
    display_order: Optional[int] = Field(None, ge=0)
    pix_key: Optional[str] = Field(None, max_length=150)


class PaymentMethodUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    icon: Optional[str] = Field(None, max_length=50)
    enabled: Optional[bool] = None
    display_order: Optional[int] = Field(None, ge=0)
    pix_key: Optional[str] = Field(None, max_length=150)


class PaymentMethodView(ORMModel):
    id: int
    name: str
    description: Optional[str] = None
    icon: Optional[str] = None
    enabled: bool
    display_order: Optional[int] = None
    pix_key: Optional[str] = None


# =============================================================================
# DASHBOARD / REPORTS
# =============================================================================

class StatValue(BaseModel):
    value: float
    trend: float


class DashboardStats(BaseModel):
    total_orders: StatValue
    delivered_orders: StatValue
    revenue: StatValue
    average_ticket: StatValue


class StatusCount(BaseModel):
    status: OrderStatus
    label: str
    count: int
    color: str


class DailyRevenue(BaseModel):
    day: str
    date: date
    revenue: float


class ProductSales(BaseModel):
    product_id: Optional[int]
    name: str
    quantity: int
    revenue: float


class PaymentMethodSales(BaseModel):
    method: str
    name: str
    count: int
    total: float


class DailySales(BaseModel):
    date: date
    orders: int
    revenue: float


class ReportOrderRow(BaseModel):
    number: Optional[str]
    created_at: Optional[datetime]
    customer_name: str
    status: OrderStatus
    status_label: str
    payment_method: str
    total: float
    items: str


class SalesReport(BaseModel):
    start: date
    end: date
    total_orders: int
    total_revenue: float
    average_ticket: float
    top_products: List[ProductSales]
    payment_methods: List[PaymentMethodSales]
    daily: List[DailySales]
    orders: List[ReportOrderRow]


class ExportQueuedResponse(BaseModel):
    success: bool = True
    task_id: str
    message: str


# =============================================================================
# COMMON
# =============================================================================

class MessageResponse(BaseModel):
    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str
    event_bus: str
    timestamp: datetime

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: str) -> str:
        if v not in ("operational", "degraded"):
            raise ValueError("status must be operational or degraded")
        return v
