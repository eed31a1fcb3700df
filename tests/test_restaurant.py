"""
Tests for restaurant customization: profile, theme, images, hours,
delivery times and payment methods.
"""

from datetime import datetime

import pytest

from restaurant_admin.models import BusinessHour, DayOfWeek, DeliveryTime
from restaurant_admin.services.restaurant import (
    business_days_summary,
    is_open_at,
    pick_delivery_window,
    today_hours,
)

# 2026-03-06 is a Friday
FRIDAY = datetime(2026, 3, 6)


def week(open_time="09:00", close_time="18:00", closed=()):
    return [
        BusinessHour(day_of_week=day, open_time=open_time, close_time=close_time, is_closed=day in closed)
        for day in DayOfWeek
    ]


class TestProfile:

    async def test_info_creates_the_row(self, client):
        assert (await client.get("/api/restaurant")).status_code == 404

        response = await client.put("/api/restaurant/info", json={
            "name": "Cantina", "phone": "1133334444", "address": "Rua C, 1",
        })
        assert response.status_code == 200
        assert response.json()["name"] == "Cantina"

        data = (await client.get("/api/restaurant")).json()
        assert data["address"] == "Rua C, 1"
        assert data["theme_settings"] == {"primaryColor": "#FF9800"}

    async def test_delivery_settings(self, client, seed_restaurant):
        response = await client.put("/api/restaurant/delivery-settings", json={
            "delivery_fee": 9.5, "min_order_value": 30,
        })
        data = response.json()
        assert (data["delivery_fee"], data["min_order_value"]) == (9.5, 30.0)
        assert data["name"] == "Casa Test"

    async def test_visual_identity_merges_theme(self, client, seed_restaurant):
        await client.put("/api/restaurant/images", json={"favicon_url": "https://cdn.test/favicon.ico"})

        response = await client.put("/api/restaurant/visual-identity", json={
            "logo_url": "https://cdn.test/logo.png",
            "theme": {"primaryColor": "#112233", "accentColor": "#ABCDEF"},
        })
        assert response.status_code == 200
        assert response.json()["logo_url"] == "https://cdn.test/logo.png"

        theme = (await client.get("/api/restaurant/theme")).json()
        assert theme["primaryColor"] == "#112233"
        assert theme["accentColor"] == "#ABCDEF"
        assert theme["faviconUrl"] == "https://cdn.test/favicon.ico"

    async def test_invalid_color(self, client):
        response = await client.put("/api/restaurant/visual-identity", json={
            "theme": {"primaryColor": "orange"},
        })
        assert response.status_code == 422


class TestImageUpload:

    async def test_upload_banner(self, client, seed_restaurant):
        response = await client.post(
            "/api/restaurant/images/banner",
            files={"file": ("banner.png", b"\x89PNG", "image/png")},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["kind"] == "banner"
        assert data["url"].startswith("data:image/png;base64,")

        restaurant = (await client.get("/api/restaurant")).json()
        assert restaurant["banner_url"] == data["url"]

    async def test_upload_favicon_goes_to_theme(self, client, seed_restaurant):
        await client.post(
            "/api/restaurant/images/favicon",
            files={"file": ("favicon.ico", b"\x00\x00\x01\x00", "image/x-icon")},
        )
        theme = (await client.get("/api/restaurant/theme")).json()
        assert theme["faviconUrl"].startswith("data:image/x-icon;base64,")

    async def test_rejects_wrong_type(self, client, seed_restaurant):
        response = await client.post(
            "/api/restaurant/images/logo",
            files={"file": ("logo.pdf", b"%PDF", "application/pdf")},
        )
        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid file type")

    async def test_rejects_large_file(self, client, seed_restaurant):
        response = await client.post(
            "/api/restaurant/images/logo",
            files={"file": ("logo.png", b"0" * (2 * 1024 * 1024 + 1), "image/png")},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "File too large. Maximum size is 2MB."


class TestBusinessHours:

    async def test_defaults_are_seeded(self, client):
        hours = (await client.get("/api/restaurant/hours")).json()
        assert [h["day_of_week"] for h in hours] == [d.value for d in DayOfWeek]
        assert hours[0]["open_time"] == "09:00"
        assert hours[6]["is_closed"] is True

    async def test_bulk_update(self, client):
        response = await client.put("/api/restaurant/hours", json={"hours": [
            {"day_of_week": "sunday", "open_time": "10:00", "close_time": "14:00", "is_closed": False},
        ]})
        sunday = response.json()[6]
        assert (sunday["open_time"], sunday["close_time"], sunday["is_closed"]) == ("10:00", "14:00", False)

    async def test_bad_time_format(self, client):
        response = await client.put("/api/restaurant/hours", json={"hours": [
            {"day_of_week": "monday", "open_time": "9am", "close_time": "18:00"},
        ]})
        assert response.status_code == 422

    async def test_preset_skips_closed_days(self, client):
        response = await client.post("/api/restaurant/hours/preset/night")
        hours = response.json()
        assert {(h["open_time"], h["close_time"]) for h in hours[:6]} == {("18:00", "02:00")}
        assert hours[6]["open_time"] == "09:00"
        assert hours[6]["is_closed"] is True


class TestOpenChecks:

    def test_regular_window(self):
        hours = week()
        assert is_open_at(hours, FRIDAY.replace(hour=9))
        assert is_open_at(hours, FRIDAY.replace(hour=18))
        assert not is_open_at(hours, FRIDAY.replace(hour=18, minute=1))

    def test_closed_day(self):
        hours = week(closed={DayOfWeek.FRIDAY})
        assert not is_open_at(hours, FRIDAY.replace(hour=12))

    def test_overnight_window(self):
        hours = week("18:00", "02:00", closed={DayOfWeek.SATURDAY})
        assert is_open_at(hours, FRIDAY.replace(hour=23))
        # Friday's window runs into Saturday morning even though Saturday is closed
        assert is_open_at(hours, datetime(2026, 3, 7, 1, 30))
        assert not is_open_at(hours, datetime(2026, 3, 7, 3, 0))
        assert not is_open_at(hours, FRIDAY.replace(hour=12))

    def test_today_hours(self):
        assert today_hours(week(), FRIDAY) == "09:00 - 18:00"
        assert today_hours(week(closed={DayOfWeek.FRIDAY}), FRIDAY) is None

    @pytest.mark.parametrize("closed,expected", [
        ((), "Every day"),
        ({DayOfWeek.SATURDAY, DayOfWeek.SUNDAY}, "Monday to Friday"),
        (set(DayOfWeek), "Closed"),
        (set(DayOfWeek) - {DayOfWeek.MONDAY, DayOfWeek.FRIDAY}, "Monday, Friday"),
    ])
    def test_business_days_summary(self, closed, expected):
        assert business_days_summary(week(closed=closed)) == expected


class TestDeliveryTimes:

    async def test_crud_and_current(self, client):
        response = await client.post("/api/restaurant/delivery-times", json={"min_time": 25, "max_time": 45})
        assert response.status_code == 201
        row = response.json()

        current = (await client.get("/api/restaurant/delivery-times/current")).json()
        assert current == {"min_time": 25, "max_time": 45}

        response = await client.put(
            f"/api/restaurant/delivery-times/{row['id']}", json={"min_time": 35, "max_time": 55}
        )
        assert response.json()["max_time"] == 55

        assert (await client.delete(f"/api/restaurant/delivery-times/{row['id']}")).status_code == 200
        current = (await client.get("/api/restaurant/delivery-times/current")).json()
        assert current == {"min_time": 30, "max_time": 50}

    async def test_window_must_be_ordered(self, client):
        response = await client.post("/api/restaurant/delivery-times", json={"min_time": 50, "max_time": 20})
        assert response.status_code == 422

    def test_pick_falls_back_to_first_row(self):
        rows = [DeliveryTime(min_time=10, max_time=20, day_of_week=DayOfWeek.MONDAY)]
        window = pick_delivery_window(rows, FRIDAY)
        assert (window.min_time, window.max_time) == (10, 20)


class TestPaymentMethods:

    async def test_ordering_and_enabled_filter(self, client, seed_payment_methods):
        await client.post("/api/restaurant/payment-methods", json={"name": "Cash"})

        everything = (await client.get("/api/restaurant/payment-methods")).json()
        # Rows without display order come last
        assert [m["name"] for m in everything] == ["PIX", "Credit card", "Voucher", "Cash"]

        enabled = (await client.get("/api/restaurant/payment-methods", params={"enabled_only": True})).json()
        assert [m["name"] for m in enabled] == ["PIX", "Credit card", "Cash"]

    async def test_enable_disable(self, client, seed_payment_methods):
        voucher = seed_payment_methods["voucher"]

        response = await client.post(f"/api/restaurant/payment-methods/{voucher.id}/enabled", params={"enabled": True})
        assert response.json()["enabled"] is True

        response = await client.post(f"/api/restaurant/payment-methods/{voucher.id}/enabled", params={"enabled": False})
        assert response.json()["enabled"] is False

    async def test_update_and_delete(self, client, seed_payment_methods):
        pix = seed_payment_methods["pix"]

        response = await client.put(f"/api/restaurant/payment-methods/{pix.id}", json={"pix_key": "key@test"})
        assert response.json()["pix_key"] == "key@test"

        assert (await client.delete(f"/api/restaurant/payment-methods/{pix.id}")).status_code == 200
        assert (await client.delete(f"/api/restaurant/payment-methods/{pix.id}")).status_code == 404
