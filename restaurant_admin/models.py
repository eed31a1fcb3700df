"""
SQLAlchemy Database Models

Tables mirrored 1:1 from the hosted restaurant database:
- Catalog: categories, products, product addons and their relations
- Orders: orders, order items, order item addons
- Delivery: drivers, delivery regions, delivery time windows
- Restaurant: restaurant profile, business hours, payment methods
"""

import enum
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    Integer,
    String,
    Float,
    DateTime,
    Text,
    Enum,
    Boolean,
    ForeignKey,
    JSON,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from restaurant_admin.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OrderStatus(str, enum.Enum):
    """Kitchen/order workflow."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELED = "canceled"


class PaymentStatus(str, enum.Enum):
    """Payment workflow."""
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class OrderType(str, enum.Enum):
    """How the customer receives the order."""
    DELIVERY = "delivery"
    TAKEAWAY = "takeaway"
    INSTORE = "instore"


class DeliveryStatus(str, enum.Enum):
    """Delivery leg of a delivery order."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class DriverStatus(str, enum.Enum):
    """Driver availability."""
    ACTIVE = "active"
    ON_DELIVERY = "on_delivery"
    INACTIVE = "inactive"


class DayOfWeek(str, enum.Enum):
    """Weekdays in Monday-first order."""
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"


# =============================================================================
# CATALOG
# =============================================================================

class Category(Base):
    """Menu section, listed by display_order."""
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    image_url = Column(String(500), nullable=True)
    display_order = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    products = relationship("Product", back_populates="category")

    def __repr__(self):
        return f"<Category #{self.id} - {self.name}>"


class Product(Base):
    """Sellable menu item."""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(150), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=False)
    image_url = Column(String(500), nullable=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True, index=True)
    available = Column(Boolean, nullable=False, default=True)
    featured = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    category = relationship("Category", back_populates="products")
    addon_relations = relationship(
        "ProductAddonRelation",
        back_populates="product",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Product #{self.id} - {self.name} - {self.price:.2f}>"


class ProductAddon(Base):
    """Optional extra sold with a product. Global addons apply to every product."""
    __tablename__ = "product_addons"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=False, default=0.0)
    available = Column(Boolean, nullable=False, default=True)
    is_global = Column(Boolean, nullable=False, default=False)
    max_options = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    relations = relationship("ProductAddonRelation", back_populates="addon")

    def __repr__(self):
        return f"<ProductAddon #{self.id} - {self.name}>"


class ProductAddonRelation(Base):
    """Links an addon to a specific product."""
    __tablename__ = "product_addon_relations"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    addon_id = Column(Integer, ForeignKey("product_addons.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    product = relationship("Product", back_populates="addon_relations")
    addon = relationship("ProductAddon", back_populates="relations")


# =============================================================================
# DELIVERY
# =============================================================================

class Driver(Base):
    """Delivery driver."""
    __tablename__ = "drivers"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    phone = Column(String(20), nullable=False)
    vehicle = Column(String(100), nullable=True)
    status = Column(Enum(DriverStatus), nullable=False, default=DriverStatus.ACTIVE)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<Driver #{self.id} - {self.name} - {self.status.value}>"


class DeliveryRegion(Base):
    """Neighbourhood or zone with its own delivery fee."""
    __tablename__ = "delivery_regions"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    fee = Column(Float, nullable=False, default=0.0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<DeliveryRegion #{self.id} - {self.name}>"


# =============================================================================
# ORDERS
# =============================================================================

class Order(Base):
    """
    Main Order table.

    Customer data is stored inline; there is no separate customer table.
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    number = Column(String(30), nullable=True, unique=True, index=True)

    order_type = Column(
        Enum(OrderType),
        default=OrderType.DELIVERY,
        nullable=False,
        index=True
    )

    # =========================================================================
    # CUSTOMER INFORMATION
    # =========================================================================
    customer_name = Column(String(100), nullable=False)
    customer_phone = Column(String(20), nullable=False, index=True)

    # =========================================================================
    # ORDER STATUS
    # =========================================================================
    status = Column(
        Enum(OrderStatus),
        default=OrderStatus.PENDING,
        nullable=False,
        index=True
    )
    payment_method = Column(String(50), nullable=False)
    payment_status = Column(
        Enum(PaymentStatus),
        default=PaymentStatus.PENDING,
        nullable=False,
    )

    # =========================================================================
    # PRICING
    # =========================================================================
    subtotal = Column(Float, nullable=False)
    delivery_fee = Column(Float, nullable=False, default=0.0)
    discount = Column(Float, nullable=False, default=0.0)
    total = Column(Float, nullable=False)

    notes = Column(Text, nullable=True)
    table_number = Column(String(20), nullable=True)

    # =========================================================================
    # DELIVERY
    # =========================================================================
    delivery_address = Column(String(255), nullable=True)
    delivery_region_id = Column(Integer, ForeignKey("delivery_regions.id"), nullable=True)
    delivery_driver_id = Column(Integer, ForeignKey("drivers.id", ondelete="SET NULL"), nullable=True)
    delivery_status = Column(Enum(DeliveryStatus), nullable=True, index=True)
    delivery_started_at = Column(DateTime(timezone=True), nullable=True)
    delivery_completed_at = Column(DateTime(timezone=True), nullable=True)

    # =========================================================================
    # TIMESTAMPS
    # =========================================================================
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )
    driver = relationship("Driver")
    region = relationship("DeliveryRegion")

    def __repr__(self):
        return f"<Order #{self.number} - {self.order_type.value} - {self.customer_name} - {self.status.value}>"


class OrderItem(Base):
    """Product line of an order. unit_price already includes addon prices."""
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    # Null once the product is deleted
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True, index=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Float, nullable=False)
    total_price = Column(Float, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), index=True)

    order = relationship("Order", back_populates="items")
    product = relationship("Product")
    addons = relationship(
        "OrderItemAddon",
        back_populates="order_item",
        cascade="all, delete-orphan",
        order_by="OrderItemAddon.id",
    )


class OrderItemAddon(Base):
    """Addon chosen for an order line."""
    __tablename__ = "order_item_addons"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_item_id = Column(Integer, ForeignKey("order_items.id"), nullable=False, index=True)
    # Null once the addon is deleted, or when it was unknown at order time
    addon_id = Column(Integer, ForeignKey("product_addons.id", ondelete="SET NULL"), nullable=True)
    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Float, nullable=False)
    total_price = Column(Float, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    order_item = relationship("OrderItem", back_populates="addons")
    addon = relationship("ProductAddon")


# =============================================================================
# RESTAURANT
# =============================================================================

class Restaurant(Base):
    """Single-row restaurant profile with branding."""
    __tablename__ = "restaurants"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(150), nullable=False)
    description = Column(Text, nullable=True)
    phone = Column(String(20), nullable=True)
    address = Column(String(255), nullable=True)
    logo_url = Column(Text, nullable=True)
    banner_url = Column(Text, nullable=True)
    delivery_fee = Column(Float, nullable=True)
    min_order_value = Column(Float, nullable=True)
    theme_settings = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<Restaurant #{self.id} - {self.name}>"


class BusinessHour(Base):
    """Opening window for one weekday. Times are HH:MM strings."""
    __tablename__ = "business_hours"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    day_of_week = Column(Enum(DayOfWeek), nullable=False, unique=True)
    open_time = Column(String(5), nullable=False)
    close_time = Column(String(5), nullable=False)
    is_closed = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class DeliveryTime(Base):
    """Estimated delivery window, optionally specific to a weekday."""
    __tablename__ = "delivery_times"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), nullable=True)
    min_time = Column(Integer, nullable=False)
    max_time = Column(Integer, nullable=False)
    day_of_week = Column(Enum(DayOfWeek), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class PaymentMethod(Base):
    """Payment option offered at checkout."""
    __tablename__ = "payment_methods"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    icon = Column(String(50), nullable=True)
    enabled = Column(Boolean, nullable=False, default=True)
    display_order = Column(Integer, nullable=True)
    pix_key = Column(String(150), nullable=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<PaymentMethod #{self.id} - {self.name}>"
