"""Capabilities consumed by the HTTP layer.

The session store, member store, desktop and capture back ends live
outside this package. Roomgate only knows the protocols below and the
value types that cross them. Failures are signalled with the exception
classes defined here and told apart by type, never by message.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from typing import Any, Protocol, Self, TypeVar, runtime_checkable

from roomgate.errors import RoomgateError
from roomgate.http.request import Request
from roomgate.http.response import ResponseWriter

W = TypeVar("W", bound=ResponseWriter)

# ---------------------------------------------------------------------------
# Errors raised by capabilities
# ---------------------------------------------------------------------------


class SessionError(RoomgateError):
    """Base for session-store failures."""


class SessionNotFoundError(SessionError):
    """The token or cookie does not name a live session."""


class SessionLoginDisabledError(SessionError):
    """The session exists but its member may not log in this way."""


class SessionLoginsLockedError(SessionError):
    """Logins are locked room-wide for non-admin members."""


class MemberError(RoomgateError):
    """Base for member-store failures."""


class MemberDoesNotExistError(MemberError):
    """No member with the requested id or username."""


class MemberAlreadyExistsError(MemberError):
    """A member with the requested username already exists."""


class MemberInvalidPasswordError(MemberError):
    """The password does not match the member's credentials."""


# ---------------------------------------------------------------------------
# Value types
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class MemberProfile:
    """What a member is allowed to do in the room."""

    name: str = ""
    is_admin: bool = False
    can_login: bool = True
    can_connect: bool = True
    can_watch: bool = True
    can_host: bool = True
    can_access_clipboard: bool = True
    plugins: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready representation."""
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["plugins"] = dict(self.plugins)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], base: Self | None = None) -> Self:
        """Build a profile from JSON, keeping *base* values for missing keys.

        Raises ``ValueError`` for unknown keys or wrongly typed values.
        """
        known = {f.name: f for f in fields(cls)}
        unknown = set(data) - set(known)
        if unknown:
            msg = f"Unknown profile fields: {', '.join(sorted(unknown))}"
            raise ValueError(msg)
        values = {} if base is None else {name: getattr(base, name) for name in known}
        for name, value in data.items():
            expected = dict if name == "plugins" else type(getattr(cls(), name))
            if not isinstance(value, expected):
                msg = f"Profile field {name!r} must be {expected.__name__}"
                raise ValueError(msg)
            values[name] = value
        return cls(**values)


@dataclass(frozen=True, slots=True)
class SessionState:
    """Live connection state of a session."""

    is_connected: bool = False
    is_watching: bool = False

    def to_dict(self) -> dict[str, bool]:
        return {"is_connected": self.is_connected, "is_watching": self.is_watching}


@dataclass(frozen=True, slots=True)
class ScreenSize:
    """A screen configuration."""

    width: int
    height: int
    rate: int

    def to_dict(self) -> dict[str, int]:
        return {"width": self.width, "height": self.height, "rate": self.rate}


@dataclass(frozen=True, slots=True)
class KeyboardMap:
    """Keyboard layout of the remote desktop."""

    layout: str
    variant: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"layout": self.layout, "variant": self.variant}


# ---------------------------------------------------------------------------
# Capabilities
# ---------------------------------------------------------------------------


@runtime_checkable
class Session(Protocol):
    """An opaque authenticated session handle."""

    @property
    def id(self) -> str: ...

    @property
    def profile(self) -> MemberProfile: ...

    @property
    def state(self) -> SessionState: ...


class SessionManager(Protocol):
    """Session store: authentication and session cookies.

    ``authenticate`` may be sync or async. It returns the session or raises
    (``SessionLoginDisabledError`` for the policy rejection, anything else
    for an invalid or missing session).
    """

    def authenticate(self, request: Request) -> Session: ...

    def cookie_enabled(self) -> bool: ...

    def cookie_set_token(self, response: W, token: str) -> W: ...

    def cookie_clear_token(self, response: W, request: Request) -> W: ...


class MemberManager(Protocol):
    """Member store. Every method may be sync or async."""

    def login(self, username: str, password: str) -> tuple[Session, str]: ...

    def logout(self, session_id: str) -> None: ...

    def select(self, member_id: str) -> MemberProfile: ...

    def select_all(self, limit: int, offset: int) -> list[tuple[str, MemberProfile]]: ...

    def insert(self, username: str, password: str, profile: MemberProfile) -> str: ...

    def update_profile(self, member_id: str, profile: MemberProfile) -> None: ...

    def update_password(self, member_id: str, password: str) -> None: ...

    def delete(self, member_id: str) -> None: ...


class DesktopManager(Protocol):
    """Remote desktop controls. Every method may be sync or async."""

    def get_screen_size(self) -> ScreenSize: ...

    def set_screen_size(self, size: ScreenSize) -> ScreenSize: ...

    def screen_configurations(self) -> list[ScreenSize]: ...

    def get_keyboard_map(self) -> KeyboardMap: ...

    def set_keyboard_map(self, keyboard_map: KeyboardMap) -> None: ...

    def get_clipboard_text(self) -> str: ...

    def set_clipboard_text(self, text: str) -> None: ...


class CaptureManager(Protocol):
    """Screen capture back end."""

    def screenshot(self, quality: int) -> bytes: ...
