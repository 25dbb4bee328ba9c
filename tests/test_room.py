"""Tests for the /room sub-tree."""

import json

from conftest import FakeCapture, FakeDesktop
from roomgate.app import App
from roomgate.testing import TestClient, assert_json
from roomgate.types import KeyboardMap, ScreenSize


class TestScreen:
    async def test_get_screen(self, app: App, alice) -> None:
        async with TestClient(app) as client:
            response = await client.get("/room/screen", headers=alice)
        assert_json(response, {"width": 1280, "height": 720, "rate": 30})

    async def test_set_screen_requires_admin(self, app: App, alice, desktop: FakeDesktop) -> None:
        async with TestClient(app) as client:
            response = await client.post(
                "/room/screen", headers=alice, json={"width": 1920, "height": 1080, "rate": 60}
            )
        assert response.status == 403
        assert desktop.screen == ScreenSize(1280, 720, 30)

    async def test_set_screen(self, app: App, admin, desktop: FakeDesktop) -> None:
        async with TestClient(app) as client:
            response = await client.post(
                "/room/screen", headers=admin, json={"width": 1920, "height": 1080, "rate": 60}
            )
        assert_json(response, {"width": 1920, "height": 1080, "rate": 60})
        assert desktop.screen == ScreenSize(1920, 1080, 60)

    async def test_set_screen_validation(self, app: App, admin) -> None:
        async with TestClient(app) as client:
            not_int = await client.post(
                "/room/screen", headers=admin, json={"width": "wide", "height": 1, "rate": 1}
            )
            unsupported = await client.post(
                "/room/screen", headers=admin, json={"width": 10, "height": 10, "rate": 1}
            )
        assert not_int.status == 400
        assert unsupported.status == 400
        assert "unsupported screen size" in unsupported.text

    async def test_configurations(self, app: App, guest) -> None:
        async with TestClient(app) as client:
            response = await client.get("/room/screen/configurations", headers=guest)
        assert_json(
            response,
            [
                {"width": 1280, "height": 720, "rate": 30},
                {"width": 1920, "height": 1080, "rate": 60},
            ],
        )


class TestScreenshot:
    async def test_screenshot(self, app: App, alice, capture: FakeCapture) -> None:
        async with TestClient(app) as client:
            response = await client.get("/room/screen/shot.jpg", headers=alice)
        assert response.status == 200
        assert response.content_type == "image/jpeg"
        assert response.header("cache-control") == "no-store"
        assert response.body.startswith(b"\xff\xd8")
        assert capture.qualities == [90]

    async def test_quality_param(self, app: App, alice, capture: FakeCapture) -> None:
        async with TestClient(app) as client:
            ok = await client.get("/room/screen/shot.jpg?quality=40", headers=alice)
            bad = await client.get("/room/screen/shot.jpg?quality=400", headers=alice)
        assert ok.status == 200
        assert bad.status == 400
        assert capture.qualities == [40]

    async def test_screenshot_requires_session(self, app: App, capture: FakeCapture) -> None:
        async with TestClient(app) as client:
            response = await client.get("/room/screen/shot.jpg")
        assert response.status == 401
        assert capture.qualities == []


class TestKeyboard:
    async def test_get_and_set(self, app: App, alice, desktop: FakeDesktop) -> None:
        async with TestClient(app) as client:
            before = await client.get("/room/keyboard/map", headers=alice)
            update = await client.post(
                "/room/keyboard/map", headers=alice, json={"layout": "de", "variant": "nodeadkeys"}
            )
        assert json.loads(before.text) == {"layout": "us", "variant": ""}
        assert update.status == 204
        assert desktop.keyboard == KeyboardMap("de", "nodeadkeys")

    async def test_layout_required(self, app: App, alice) -> None:
        async with TestClient(app) as client:
            response = await client.post("/room/keyboard/map", headers=alice, json={"variant": "x"})
        assert response.status == 400


class TestClipboard:
    async def test_read_write(self, app: App, alice, desktop: FakeDesktop) -> None:
        async with TestClient(app) as client:
            write = await client.post("/room/clipboard", headers=alice, json={"text": "hello"})
            read = await client.get("/room/clipboard", headers=alice)
        assert write.status == 204
        assert_json(read, {"text": "hello"})
        assert desktop.clipboard == "hello"

    async def test_denied_without_clipboard_access(
        self, app: App, guest, desktop: FakeDesktop
    ) -> None:
        async with TestClient(app) as client:
            read = await client.get("/room/clipboard", headers=guest)
            write = await client.post("/room/clipboard", headers=guest, json={"text": "x"})
        assert read.status == 403
        assert read.text == "session cannot access clipboard"
        assert write.status == 403
        assert desktop.clipboard == ""
