"""In-memory capabilities and fixtures for roomgate API tests."""

from dataclasses import dataclass, field

import anyio
import pytest

from roomgate.api.manager import ApiManager
from roomgate.app import App
from roomgate.http.request import Request
from roomgate.types import (
    KeyboardMap,
    MemberAlreadyExistsError,
    MemberDoesNotExistError,
    MemberInvalidPasswordError,
    MemberProfile,
    ScreenSize,
    SessionLoginDisabledError,
    SessionNotFoundError,
    SessionState,
)

COOKIE_NAME = "ROOMGATE_SESSION"


@dataclass(frozen=True)
class FakeSession:
    id: str
    profile: MemberProfile
    state: SessionState = field(default_factory=SessionState)


class FakeSessions:
    """Session store keyed by token.

    The token is read from the session cookie when cookies are enabled and
    from an ``Authorization: Bearer`` header otherwise. ``error`` and
    ``delay`` force failures for gate tests.
    """

    def __init__(self, *, cookies: bool = True) -> None:
        self.cookies = cookies
        self.by_token: dict[str, FakeSession] = {}
        self.error: Exception | None = None
        self.delay: float = 0.0
        self.authenticate_calls = 0
        self.cleared = 0

    async def authenticate(self, request: Request) -> FakeSession:
        self.authenticate_calls += 1
        if self.delay:
            await anyio.sleep(self.delay)
        if self.error is not None:
            raise self.error

        if self.cookies:
            token = request.cookies.get(COOKIE_NAME)
        else:
            scheme, _, token = request.headers.get("authorization", "").partition(" ")
            token = token if scheme == "Bearer" else None
        if not token or token not in self.by_token:
            raise SessionNotFoundError("no session for token")

        session = self.by_token[token]
        if not session.profile.can_login:
            raise SessionLoginDisabledError(session.id)
        return session

    def cookie_enabled(self) -> bool:
        return self.cookies

    def cookie_set_token(self, response, token):
        return response.with_cookie(COOKIE_NAME, token)

    def cookie_clear_token(self, response, request):
        self.cleared += 1
        return response.without_cookie(COOKIE_NAME)


class FakeMembers:
    """Member store with plaintext passwords. ``login`` is async, the rest sync."""

    def __init__(self, sessions: FakeSessions) -> None:
        self._sessions = sessions
        self.members: dict[str, dict] = {}
        self.logged_out: list[str] = []
        self._next_id = 1

    def insert(self, username: str, password: str, profile: MemberProfile) -> str:
        if any(m["username"] == username for m in self.members.values()):
            raise MemberAlreadyExistsError(username)
        member_id = f"m{self._next_id}"
        self._next_id += 1
        self.members[member_id] = {"username": username, "password": password, "profile": profile}
        return member_id

    async def login(self, username: str, password: str) -> tuple[FakeSession, str]:
        for member_id, member in self.members.items():
            if member["username"] != username:
                continue
            if member["password"] != password:
                raise MemberInvalidPasswordError(username)
            if not member["profile"].can_login:
                raise SessionLoginDisabledError(username)
            token = f"token-{member_id}"
            session = FakeSession(id=member_id, profile=member["profile"])
            self._sessions.by_token[token] = session
            return session, token
        raise MemberDoesNotExistError(username)

    def logout(self, session_id: str) -> None:
        self.logged_out.append(session_id)
        for token, session in list(self._sessions.by_token.items()):
            if session.id == session_id:
                del self._sessions.by_token[token]

    def select(self, member_id: str) -> MemberProfile:
        return self._get(member_id)["profile"]

    def select_all(self, limit: int, offset: int) -> list[tuple[str, MemberProfile]]:
        entries = [(member_id, m["profile"]) for member_id, m in self.members.items()]
        return entries[offset : offset + limit]

    def update_profile(self, member_id: str, profile: MemberProfile) -> None:
        self._get(member_id)["profile"] = profile

    def update_password(self, member_id: str, password: str) -> None:
        self._get(member_id)["password"] = password

    def delete(self, member_id: str) -> None:
        self._get(member_id)
        del self.members[member_id]

    def _get(self, member_id: str) -> dict:
        try:
            return self.members[member_id]
        except KeyError:
            raise MemberDoesNotExistError(member_id) from None


class FakeDesktop:
    def __init__(self) -> None:
        self.configurations = [ScreenSize(1280, 720, 30), ScreenSize(1920, 1080, 60)]
        self.screen = self.configurations[0]
        self.keyboard = KeyboardMap("us")
        self.clipboard = ""

    def get_screen_size(self) -> ScreenSize:
        return self.screen

    async def set_screen_size(self, size: ScreenSize) -> ScreenSize:
        if size not in self.configurations:
            msg = f"unsupported screen size {size.width}x{size.height}@{size.rate}"
            raise ValueError(msg)
        self.screen = size
        return size

    def screen_configurations(self) -> list[ScreenSize]:
        return list(self.configurations)

    def get_keyboard_map(self) -> KeyboardMap:
        return self.keyboard

    def set_keyboard_map(self, keyboard_map: KeyboardMap) -> None:
        self.keyboard = keyboard_map

    def get_clipboard_text(self) -> str:
        return self.clipboard

    def set_clipboard_text(self, text: str) -> None:
        self.clipboard = text


class FakeCapture:
    def __init__(self) -> None:
        self.qualities: list[int] = []

    def screenshot(self, quality: int) -> bytes:
        self.qualities.append(quality)
        return b"\xff\xd8\xff\xe0fake-jpeg"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sessions() -> FakeSessions:
    return FakeSessions()


@pytest.fixture
def members(sessions: FakeSessions) -> FakeMembers:
    store = FakeMembers(sessions)
    store.insert("admin", "admin-pass", MemberProfile(name="Admin", is_admin=True))
    store.insert("alice", "alice-pass", MemberProfile(name="Alice"))
    store.insert(
        "guest",
        "guest-pass",
        MemberProfile(name="Guest", can_access_clipboard=False),
    )
    return store


@pytest.fixture
def desktop() -> FakeDesktop:
    return FakeDesktop()


@pytest.fixture
def capture() -> FakeCapture:
    return FakeCapture()


@pytest.fixture
def api(
    sessions: FakeSessions,
    members: FakeMembers,
    desktop: FakeDesktop,
    capture: FakeCapture,
) -> ApiManager:
    return ApiManager(sessions, members, desktop, capture, auth_timeout=0.5)


@pytest.fixture
def app(api: ApiManager) -> App:
    app = App()
    app.mount(api.route)
    return app


async def login_token(members: FakeMembers, username: str) -> str:
    _, token = await members.login(username, f"{username}-pass")
    return token


def cookie(token: str) -> dict[str, str]:
    return {"cookie": f"{COOKIE_NAME}={token}"}


@pytest.fixture
async def admin(members: FakeMembers) -> dict[str, str]:
    """Request headers authenticating as the admin member."""
    return cookie(await login_token(members, "admin"))


@pytest.fixture
async def alice(members: FakeMembers) -> dict[str, str]:
    """Request headers authenticating as a regular member."""
    return cookie(await login_token(members, "alice"))


@pytest.fixture
async def guest(members: FakeMembers) -> dict[str, str]:
    """Request headers authenticating as a member without clipboard access."""
    return cookie(await login_token(members, "guest"))
