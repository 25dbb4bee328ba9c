"""Room controls: the ``/room`` sub-tree."""

from typing import Any

from roomgate._internal.invoke import invoke
from roomgate.api.body import read_object, require_int, require_str
from roomgate.auth import admins_only, clipboard_access_only
from roomgate.errors import BadRequest
from roomgate.http.request import Request
from roomgate.http.response import Response
from roomgate.routing.router import Router
from roomgate.types import CaptureManager, DesktopManager, KeyboardMap, ScreenSize

DEFAULT_SCREENSHOT_QUALITY = 90


class RoomHandler:
    """Screen, keyboard and clipboard of the shared desktop.

    Reading is open to every member; changing the screen size needs the
    admin flag and the clipboard needs clipboard access.
    """

    __slots__ = ("_capture", "_desktop")

    def __init__(self, desktop: DesktopManager, capture: CaptureManager) -> None:
        self._desktop = desktop
        self._capture = capture

    def route(self, r: Router) -> None:
        r.get("/screen", self.screen_size)
        r.get("/screen/configurations", self.screen_configurations)
        r.get("/screen/shot.jpg", self.screenshot)

        r.get("/keyboard/map", self.keyboard_map)
        r.post("/keyboard/map", self.set_keyboard_map)

        r.group(self._admin_routes)
        r.group(self._clipboard_routes)

    def _admin_routes(self, r: Router) -> None:
        r.use(admins_only)
        r.post("/screen", self.set_screen_size)

    def _clipboard_routes(self, r: Router) -> None:
        r.use(clipboard_access_only)
        r.get("/clipboard", self.clipboard)
        r.post("/clipboard", self.set_clipboard)

    # -- Screen --

    async def screen_size(self) -> dict[str, int]:
        return (await invoke(self._desktop.get_screen_size)).to_dict()

    async def set_screen_size(self, request: Request) -> dict[str, int]:
        data = await read_object(request)
        size = ScreenSize(
            width=require_int(data, "width"),
            height=require_int(data, "height"),
            rate=require_int(data, "rate"),
        )
        try:
            applied = await invoke(self._desktop.set_screen_size, size)
        except ValueError as exc:
            raise BadRequest(str(exc)) from exc
        return applied.to_dict()

    async def screen_configurations(self) -> list[dict[str, int]]:
        return [size.to_dict() for size in await invoke(self._desktop.screen_configurations)]

    async def screenshot(self, request: Request) -> Response:
        quality = request.query.get_int("quality", DEFAULT_SCREENSHOT_QUALITY)
        if quality is None or not 1 <= quality <= 100:
            raise BadRequest("'quality' must be an integer between 1 and 100")

        image = await invoke(self._capture.screenshot, quality)
        return Response(body=image, content_type="image/jpeg").with_header(
            "Cache-Control", "no-store"
        )

    # -- Keyboard --

    async def keyboard_map(self) -> dict[str, str]:
        return (await invoke(self._desktop.get_keyboard_map)).to_dict()

    async def set_keyboard_map(self, request: Request) -> None:
        data = await read_object(request)
        variant: Any = data.get("variant", "")
        if not isinstance(variant, str):
            raise BadRequest("'variant' must be a string")
        keyboard_map = KeyboardMap(layout=require_str(data, "layout"), variant=variant)
        await invoke(self._desktop.set_keyboard_map, keyboard_map)

    # -- Clipboard --

    async def clipboard(self) -> dict[str, str]:
        return {"text": await invoke(self._desktop.get_clipboard_text)}

    async def set_clipboard(self, request: Request) -> None:
        data = await read_object(request)
        await invoke(self._desktop.set_clipboard_text, require_str(data, "text"))
