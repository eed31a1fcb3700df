"""
Display helpers for money, phones, times, addresses and images.
"""

import base64
import re
from datetime import time
from typing import Optional, Union

from restaurant_admin.core.config import get_settings

ALLOWED_IMAGE_TYPES = (
    "image/jpeg",
    "image/png",
    "image/webp",
    "image/svg+xml",
    "image/x-icon",
)


def format_currency(value: Optional[float]) -> str:
    """Format an amount as `R$ 1.234,56`."""
    symbol = get_settings().currency_symbol
    amount = float(value or 0)
    sign = "-" if amount < 0 else ""
    # 1,234.56 -> 1.234,56
    text = f"{abs(amount):,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}{symbol} {text}"


def only_digits(value: Optional[str]) -> str:
    return re.sub(r"\D", "", value or "")


def format_phone(phone: Optional[str]) -> str:
    """`(11) 98765-4321` for mobiles, `(11) 8765-4321` for landlines."""
    digits = only_digits(phone)
    if len(digits) == 11:
        return f"({digits[:2]}) {digits[2:7]}-{digits[7:]}"
    if len(digits) == 10:
        return f"({digits[:2]}) {digits[2:6]}-{digits[6:]}"
    return digits


def normalize_phone(phone: Optional[str]) -> str:
    """Digits only, with the country code prepended when missing."""
    country = get_settings().phone_country_code
    digits = only_digits(phone)
    if digits.startswith(country) and len(digits) >= 12:
        return digits
    return f"{country}{digits}"


def format_time(value: Union[str, time, None]) -> str:
    """`HH:MM` from a time or a `HH:MM:SS` string."""
    if value is None:
        return ""
    if isinstance(value, time):
        return value.strftime("%H:%M")
    return str(value)[:5]


def compose_address(
    street: Optional[str] = None,
    number: Optional[str] = None,
    complement: Optional[str] = None,
    neighborhood: Optional[str] = None,
    zip_code: Optional[str] = None,
) -> str:
    parts = [street, number, complement, neighborhood, zip_code]
    return ", ".join(p.strip() for p in parts if p and p.strip())


def validate_image_file(
    content_type: Optional[str],
    size: int,
    max_size_mb: Optional[float] = None,
) -> Optional[str]:
    """
    Check an uploaded image.

    Returns:
        An error message, or None when the file is acceptable
    """
    if max_size_mb is None:
        max_size_mb = get_settings().max_image_size_mb

    if content_type not in ALLOWED_IMAGE_TYPES:
        return "Invalid file type. Use JPEG, PNG, WEBP, SVG or ICO images."
    if size > max_size_mb * 1024 * 1024:
        return f"File too large. Maximum size is {max_size_mb:g}MB."
    return None


def to_data_url(content_type: str, data: bytes) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{content_type};base64,{encoded}"
