"""
Restaurant Customization Endpoints

Basic information, delivery settings, visual identity, images,
business hours, delivery time windows and payment methods.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_admin.core.errors import NotFoundError
from restaurant_admin.database import get_db
from restaurant_admin.schemas import (
    BusinessHoursUpdate,
    BusinessHourView,
    DeliverySettingsUpdate,
    DeliveryTimeCreate,
    DeliveryTimeView,
    DeliveryWindow,
    ErrorResponse,
    HoursPreset,
    ImageKind,
    ImagesUpdate,
    ImageUploadResponse,
    MessageResponse,
    PaymentMethodCreate,
    PaymentMethodUpdate,
    PaymentMethodView,
    RestaurantInfoUpdate,
    RestaurantView,
    ThemeSettings,
    VisualIdentityUpdate,
)
from restaurant_admin.services import restaurant as restaurant_service

router = APIRouter(prefix="/api/restaurant", tags=["Restaurant"])


# =============================================================================
# RESTAURANT ROW
# =============================================================================

@router.get("", response_model=RestaurantView, responses={404: {"model": ErrorResponse}})
async def get_restaurant(db: AsyncSession = Depends(get_db)):
    restaurant = await restaurant_service.get_restaurant(db)
    if restaurant is None:
        raise NotFoundError("Restaurant", "-")
    return restaurant


@router.put("/info", response_model=RestaurantView)
async def update_info(payload: RestaurantInfoUpdate, db: AsyncSession = Depends(get_db)):
    return await restaurant_service.update_basic_info(db, payload)


@router.put("/delivery-settings", response_model=RestaurantView)
async def update_delivery_settings(payload: DeliverySettingsUpdate, db: AsyncSession = Depends(get_db)):
    return await restaurant_service.update_delivery_settings(db, payload)


@router.get("/theme", response_model=ThemeSettings, response_model_by_alias=True)
async def get_theme(db: AsyncSession = Depends(get_db)) -> ThemeSettings:
    return restaurant_service.theme_of(await restaurant_service.get_restaurant(db))


@router.put("/visual-identity", response_model=RestaurantView)
async def update_visual_identity(payload: VisualIdentityUpdate, db: AsyncSession = Depends(get_db)):
    return await restaurant_service.update_visual_identity(db, payload)


@router.put("/images", response_model=RestaurantView)
async def update_images(payload: ImagesUpdate, db: AsyncSession = Depends(get_db)):
    return await restaurant_service.update_images(db, payload)


@router.post(
    "/images/{kind}",
    response_model=ImageUploadResponse,
    responses={400: {"model": ErrorResponse}},
)
async def upload_image(
    kind: ImageKind,
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
) -> ImageUploadResponse:
    """Accepts JPEG, PNG, WEBP, SVG or ICO up to the configured size."""
    data = await file.read()
    url = await restaurant_service.upload_image(db, kind, file.content_type, data)
    return ImageUploadResponse(kind=kind, url=url)


# =============================================================================
# BUSINESS HOURS
# =============================================================================

@router.get("/hours", response_model=list[BusinessHourView])
async def list_hours(db: AsyncSession = Depends(get_db)):
    return await restaurant_service.list_business_hours(db)


@router.put("/hours", response_model=list[BusinessHourView])
async def update_hours(payload: BusinessHoursUpdate, db: AsyncSession = Depends(get_db)):
    return await restaurant_service.update_business_hours(db, payload.hours)


@router.post("/hours/preset/{preset}", response_model=list[BusinessHourView])
async def apply_preset(preset: HoursPreset, db: AsyncSession = Depends(get_db)):
    """Changes the times of open days only."""
    return await restaurant_service.apply_hours_preset(db, preset)


# =============================================================================
# DELIVERY TIMES
# =============================================================================

@router.get("/delivery-times", response_model=list[DeliveryTimeView])
async def list_delivery_times(db: AsyncSession = Depends(get_db)):
    return await restaurant_service.list_delivery_times(db)


@router.get("/delivery-times/current", response_model=DeliveryWindow)
async def current_delivery_time(db: AsyncSession = Depends(get_db)) -> DeliveryWindow:
    return await restaurant_service.current_delivery_time(db)


@router.post("/delivery-times", response_model=DeliveryTimeView, status_code=201)
async def create_delivery_time(payload: DeliveryTimeCreate, db: AsyncSession = Depends(get_db)):
    return await restaurant_service.create_delivery_time(db, payload)


@router.put(
    "/delivery-times/{delivery_time_id}",
    response_model=DeliveryTimeView,
    responses={404: {"model": ErrorResponse}},
)
async def update_delivery_time(
    delivery_time_id: int,
    payload: DeliveryTimeCreate,
    db: AsyncSession = Depends(get_db),
):
    return await restaurant_service.update_delivery_time(db, delivery_time_id, payload)


@router.delete("/delivery-times/{delivery_time_id}", response_model=MessageResponse)
async def delete_delivery_time(delivery_time_id: int, db: AsyncSession = Depends(get_db)) -> MessageResponse:
    await restaurant_service.delete_delivery_time(db, delivery_time_id)
    return MessageResponse(message=f"Delivery time #{delivery_time_id} deleted")


# =============================================================================
# PAYMENT METHODS
# =============================================================================

@router.get("/payment-methods", response_model=list[PaymentMethodView])
async def list_payment_methods(
    enabled_only: bool = Query(False),
    db: AsyncSession = Depends(get_db),
):
    return await restaurant_service.list_payment_methods(db, enabled_only=enabled_only)


@router.post("/payment-methods", response_model=PaymentMethodView, status_code=201)
async def create_payment_method(payload: PaymentMethodCreate, db: AsyncSession = Depends(get_db)):
    return await restaurant_service.create_payment_method(db, payload)


@router.put(
    "/payment-methods/{method_id}",
    response_model=PaymentMethodView,
    responses={404: {"model": ErrorResponse}},
)
async def update_payment_method(method_id: int, payload: PaymentMethodUpdate, db: AsyncSession = Depends(get_db)):
    return await restaurant_service.update_payment_method(db, method_id, payload)


@router.post("/payment-methods/{method_id}/enabled", response_model=PaymentMethodView)
async def set_payment_method_enabled(
    method_id: int,
    enabled: Optional[bool] = Query(True),
    db: AsyncSession = Depends(get_db),
):
    return await restaurant_service.set_payment_method_enabled(db, method_id, bool(enabled))


@router.delete("/payment-methods/{method_id}", response_model=MessageResponse)
async def delete_payment_method(method_id: int, db: AsyncSession = Depends(get_db)) -> MessageResponse:
    await restaurant_service.delete_payment_method(db, method_id)
    return MessageResponse(message=f"Payment method #{method_id} deleted")
