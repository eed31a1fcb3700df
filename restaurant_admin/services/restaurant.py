"""
Restaurant Customization Service

Everything the settings and customization pages edit:
    - Basic information and delivery settings (single restaurant row)
    - Visual identity (theme colors, favicon) and branding images
    - Business hours with presets and open-now checks
    - Delivery time windows
    - Payment methods

Times are "HH:MM" strings. A window whose close time is earlier than its
open time runs past midnight.
"""

import logging
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_admin.core.config import get_settings
from restaurant_admin.core.errors import BusinessRuleError, NotFoundError
from restaurant_admin.models import (
    BusinessHour,
    DayOfWeek,
    DeliveryTime,
    PaymentMethod,
    Restaurant,
)
from restaurant_admin.schemas import (
    BusinessHourUpdate,
    DeliverySettingsUpdate,
    DeliveryTimeCreate,
    DeliveryWindow,
    HoursPreset,
    ImageKind,
    ImagesUpdate,
    PaymentMethodCreate,
    PaymentMethodUpdate,
    RestaurantInfoUpdate,
    ThemeSettings,
    VisualIdentityUpdate,
)
from restaurant_admin.services.formatting import format_time, to_data_url, validate_image_file

logger = logging.getLogger(__name__)
settings = get_settings()

# Monday-first, matching datetime.weekday()
WEEKDAYS: list[DayOfWeek] = list(DayOfWeek)

WEEKDAY_LABELS = {
    DayOfWeek.MONDAY: "Monday",
    DayOfWeek.TUESDAY: "Tuesday",
    DayOfWeek.WEDNESDAY: "Wednesday",
    DayOfWeek.THURSDAY: "Thursday",
    DayOfWeek.FRIDAY: "Friday",
    DayOfWeek.SATURDAY: "Saturday",
    DayOfWeek.SUNDAY: "Sunday",
}

HOURS_PRESETS: dict[HoursPreset, tuple[str, str]] = {
    HoursPreset.COMMERCIAL: ("09:00", "18:00"),
    HoursPreset.EXTENDED: ("08:00", "22:00"),
    HoursPreset.NIGHT: ("18:00", "02:00"),
    HoursPreset.LATE_NIGHT: ("22:00", "06:00"),
    HoursPreset.FULL_DAY: ("00:00", "23:59"),
}

DEFAULT_OPEN = "09:00"
DEFAULT_CLOSE = "18:00"

DEFAULT_THEME = {"primaryColor": "#FF9800"}

# Names for payment method keywords stored on older orders
WELL_KNOWN_PAYMENT_METHODS = {
    "pix": "PIX",
    "credit": "Credit card",
    "debit": "Debit card",
    "cash": "Cash",
    "transfer": "Bank transfer",
}
UNKNOWN_PAYMENT_METHOD = "Unknown method"


def local_now() -> datetime:
    return datetime.now(ZoneInfo(settings.timezone))


def weekday_of(moment: datetime) -> DayOfWeek:
    return WEEKDAYS[moment.weekday()]


# =============================================================================
# RESTAURANT ROW
# =============================================================================

async def get_restaurant(db: AsyncSession) -> Optional[Restaurant]:
    """The restaurant profile (there is at most one row)."""
    result = await db.execute(select(Restaurant).order_by(Restaurant.id).limit(1))
    return result.scalar_one_or_none()


async def _get_or_create_restaurant(db: AsyncSession) -> Restaurant:
    restaurant = await get_restaurant(db)
    if restaurant is None:
        restaurant = Restaurant(name=settings.restaurant_name, theme_settings=dict(DEFAULT_THEME))
        db.add(restaurant)
        await db.flush()
        logger.info("Restaurant profile created")
    return restaurant


async def _save(db: AsyncSession, restaurant: Restaurant) -> Restaurant:
    await db.commit()
    await db.refresh(restaurant)
    return restaurant


async def update_basic_info(db: AsyncSession, payload: RestaurantInfoUpdate) -> Restaurant:
    restaurant = await _get_or_create_restaurant(db)
    restaurant.name = payload.name
    restaurant.description = payload.description
    restaurant.phone = payload.phone
    restaurant.address = payload.address
    logger.info(f"Restaurant information updated: {payload.name}")
    return await _save(db, restaurant)


async def update_delivery_settings(db: AsyncSession, payload: DeliverySettingsUpdate) -> Restaurant:
    restaurant = await _get_or_create_restaurant(db)
    restaurant.delivery_fee = payload.delivery_fee
    restaurant.min_order_value = payload.min_order_value
    logger.info(
        f"Delivery settings updated: fee={payload.delivery_fee} min_order={payload.min_order_value}"
    )
    return await _save(db, restaurant)


def theme_of(restaurant: Optional[Restaurant]) -> ThemeSettings:
    """Theme stored on the restaurant row, defaults filled in."""
    stored = (restaurant.theme_settings if restaurant else None) or {}
    return ThemeSettings.model_validate({**DEFAULT_THEME, **stored})


async def update_visual_identity(db: AsyncSession, payload: VisualIdentityUpdate) -> Restaurant:
    restaurant = await _get_or_create_restaurant(db)
    if payload.logo_url is not None:
        restaurant.logo_url = payload.logo_url
    # Reassign so the JSON column is flagged dirty
    restaurant.theme_settings = {
        **(restaurant.theme_settings or {}),
        **payload.theme.model_dump(by_alias=True, exclude_none=True),
    }
    logger.info(f"Visual identity updated: {restaurant.theme_settings}")
    return await _save(db, restaurant)


async def update_images(db: AsyncSession, payload: ImagesUpdate) -> Restaurant:
    restaurant = await _get_or_create_restaurant(db)
    if payload.banner_url is not None:
        restaurant.banner_url = payload.banner_url
    if payload.logo_url is not None:
        restaurant.logo_url = payload.logo_url
    if payload.favicon_url is not None:
        restaurant.theme_settings = {**(restaurant.theme_settings or {}), "faviconUrl": payload.favicon_url}
    return await _save(db, restaurant)


async def upload_image(
    db: AsyncSession,
    kind: ImageKind,
    content_type: Optional[str],
    data: bytes,
) -> str:
    """
    Store an uploaded branding image as a data URL.

    Raises:
        BusinessRuleError: Unsupported type or file too large
    """
    error = validate_image_file(content_type, len(data))
    if error:
        raise BusinessRuleError(error)

    url = to_data_url(content_type, data)
    field = {
        ImageKind.BANNER: "banner_url",
        ImageKind.LOGO: "logo_url",
        ImageKind.FAVICON: "favicon_url",
    }[kind]
    await update_images(db, ImagesUpdate(**{field: url}))
    logger.info(f"{kind.value} image uploaded ({len(data)} bytes, {content_type})")
    return url


# =============================================================================
# BUSINESS HOURS
# =============================================================================

async def list_business_hours(db: AsyncSession) -> list[BusinessHour]:
    """Hours for the seven weekdays, seeding the defaults when none exist."""
    result = await db.execute(select(BusinessHour))
    hours = list(result.scalars().all())

    existing = {h.day_of_week for h in hours}
    missing = [
        BusinessHour(
            day_of_week=day,
            open_time=DEFAULT_OPEN,
            close_time=DEFAULT_CLOSE,
            is_closed=day == DayOfWeek.SUNDAY,
        )
        for day in WEEKDAYS
        if day not in existing
    ]
    if missing:
        db.add_all(missing)
        await db.commit()
        hours.extend(missing)
        logger.info(f"Default business hours created for {len(missing)} day(s)")

    return sorted(hours, key=lambda h: WEEKDAYS.index(h.day_of_week))


async def update_business_hours(db: AsyncSession, updates: list[BusinessHourUpdate]) -> list[BusinessHour]:
    hours = {h.day_of_week: h for h in await list_business_hours(db)}
    for update in updates:
        row = hours[update.day_of_week]
        row.open_time = update.open_time
        row.close_time = update.close_time
        row.is_closed = update.is_closed
    await db.commit()
    logger.info(f"Business hours updated for {len(updates)} day(s)")
    return await list_business_hours(db)


async def apply_hours_preset(db: AsyncSession, preset: HoursPreset) -> list[BusinessHour]:
    """Set every open day to the preset window. Closed days stay closed."""
    open_time, close_time = HOURS_PRESETS[preset]
    hours = await list_business_hours(db)
    for row in hours:
        if not row.is_closed:
            row.open_time = open_time
            row.close_time = close_time
    await db.commit()
    logger.info(f"Hours preset '{preset.value}' applied ({open_time}-{close_time})")
    return await list_business_hours(db)


def is_open_at(hours: list[BusinessHour], moment: datetime) -> bool:
    """
    Open check for a moment.

    A window spanning midnight belongs to the day it opens and also covers
    the early hours of the following day.
    """
    by_day = {h.day_of_week: h for h in hours}
    current = moment.strftime("%H:%M")

    today = by_day.get(weekday_of(moment))
    if today and not today.is_closed:
        open_time, close_time = format_time(today.open_time), format_time(today.close_time)
        if close_time < open_time:
            if current >= open_time:
                return True
        elif open_time <= current <= close_time:
            return True

    yesterday = by_day.get(WEEKDAYS[(moment.weekday() - 1) % 7])
    if yesterday and not yesterday.is_closed:
        open_time, close_time = format_time(yesterday.open_time), format_time(yesterday.close_time)
        if close_time < open_time and current <= close_time:
            return True

    return False


async def is_open_now(db: AsyncSession, now: Optional[datetime] = None) -> bool:
    hours = await list_business_hours(db)
    return is_open_at(hours, now or local_now())


def today_hours(hours: list[BusinessHour], moment: datetime) -> Optional[str]:
    """`HH:MM - HH:MM` for the weekday of `moment`, None when closed."""
    row = next((h for h in hours if h.day_of_week == weekday_of(moment)), None)
    if row is None or row.is_closed:
        return None
    return f"{format_time(row.open_time)} - {format_time(row.close_time)}"


def business_days_summary(hours: list[BusinessHour]) -> str:
    open_days = [h.day_of_week for h in hours if not h.is_closed]
    open_days.sort(key=WEEKDAYS.index)

    if len(open_days) == 7:
        return "Every day"
    if open_days == WEEKDAYS[:5]:
        return "Monday to Friday"
    if not open_days:
        return "Closed"
    return ", ".join(WEEKDAY_LABELS[d] for d in open_days)


# =============================================================================
# DELIVERY TIMES
# =============================================================================

async def list_delivery_times(db: AsyncSession) -> list[DeliveryTime]:
    result = await db.execute(select(DeliveryTime).order_by(DeliveryTime.id))
    return list(result.scalars().all())


async def create_delivery_time(db: AsyncSession, payload: DeliveryTimeCreate) -> DeliveryTime:
    restaurant = await get_restaurant(db)
    row = DeliveryTime(
        restaurant_id=restaurant.id if restaurant else None,
        min_time=payload.min_time,
        max_time=payload.max_time,
        day_of_week=payload.day_of_week,
    )
    db.add(row)
    await db.commit()
    await db.refresh(row)
    logger.info(f"Delivery time #{row.id} created: {row.min_time}-{row.max_time} min")
    return row


async def update_delivery_time(db: AsyncSession, delivery_time_id: int, payload: DeliveryTimeCreate) -> DeliveryTime:
    row = await db.get(DeliveryTime, delivery_time_id)
    if row is None:
        raise NotFoundError("Delivery time", delivery_time_id)
    row.min_time = payload.min_time
    row.max_time = payload.max_time
    row.day_of_week = payload.day_of_week
    await db.commit()
    await db.refresh(row)
    return row


async def delete_delivery_time(db: AsyncSession, delivery_time_id: int) -> None:
    row = await db.get(DeliveryTime, delivery_time_id)
    if row is None:
        raise NotFoundError("Delivery time", delivery_time_id)
    await db.delete(row)
    await db.commit()
    logger.info(f"Delivery time #{delivery_time_id} deleted")


def pick_delivery_window(rows: list[DeliveryTime], moment: datetime) -> DeliveryWindow:
    """Weekday-specific row, else the default row, else the first row, else settings."""
    weekday = weekday_of(moment)
    chosen = (
        next((r for r in rows if r.day_of_week == weekday), None)
        or next((r for r in rows if r.day_of_week is None), None)
        or (rows[0] if rows else None)
    )
    if chosen is None:
        return DeliveryWindow(
            min_time=settings.default_delivery_min_minutes,
            max_time=settings.default_delivery_max_minutes,
        )
    return DeliveryWindow(min_time=chosen.min_time, max_time=chosen.max_time)


async def current_delivery_time(db: AsyncSession, now: Optional[datetime] = None) -> DeliveryWindow:
    return pick_delivery_window(await list_delivery_times(db), now or local_now())


# =============================================================================
# PAYMENT METHODS
# =============================================================================

async def list_payment_methods(db: AsyncSession, enabled_only: bool = False) -> list[PaymentMethod]:
    query = select(PaymentMethod).order_by(PaymentMethod.display_order.is_(None), PaymentMethod.display_order, PaymentMethod.id)
    if enabled_only:
        query = query.where(PaymentMethod.enabled.is_(True))
    result = await db.execute(query)
    return list(result.scalars().all())


async def create_payment_method(db: AsyncSession, payload: PaymentMethodCreate) -> PaymentMethod:
    restaurant = await get_restaurant(db)
    method = PaymentMethod(**payload.model_dump(), restaurant_id=restaurant.id if restaurant else None)
    db.add(method)
    await db.commit()
    await db.refresh(method)
    logger.info(f"Payment method #{method.id} created: {method.name}")
    return method


async def update_payment_method(db: AsyncSession, method_id: int, payload: PaymentMethodUpdate) -> PaymentMethod:
    method = await db.get(PaymentMethod, method_id)
    if method is None:
        raise NotFoundError("Payment method", method_id)
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(method, key, value)
    await db.commit()
    await db.refresh(method)
    return method


async def set_payment_method_enabled(db: AsyncSession, method_id: int, enabled: bool) -> PaymentMethod:
    return await update_payment_method(db, method_id, PaymentMethodUpdate(enabled=enabled))


async def delete_payment_method(db: AsyncSession, method_id: int) -> None:
    method = await db.get(PaymentMethod, method_id)
    if method is None:
        raise NotFoundError("Payment method", method_id)
    await db.delete(method)
    await db.commit()
    logger.info(f"Payment method #{method_id} deleted")


async def payment_method_name(db: AsyncSession, method: Optional[str]) -> str:
    """
    Resolve a payment method stored on an order to a display name.

    Orders store the method id. Older orders store a keyword such as "pix".
    """
    if not method:
        return UNKNOWN_PAYMENT_METHOD
    if method.isdigit():
        row = await db.get(PaymentMethod, int(method))
        if row is not None:
            return row.name
    return WELL_KNOWN_PAYMENT_METHODS.get(method.lower(), UNKNOWN_PAYMENT_METHOD)
