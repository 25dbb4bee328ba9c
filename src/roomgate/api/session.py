"""Login, logout and whoami."""

import logging
from typing import Any

from roomgate._internal.invoke import invoke
from roomgate.api.body import read_object, require_str
from roomgate.auth import get_session
from roomgate.errors import Forbidden, Unauthorized
from roomgate.http.request import Request
from roomgate.http.response import Response
from roomgate.server.negotiation import json_response
from roomgate.types import (
    MemberDoesNotExistError,
    MemberInvalidPasswordError,
    MemberManager,
    Session,
    SessionLoginDisabledError,
    SessionLoginsLockedError,
    SessionManager,
)

logger = logging.getLogger("roomgate.api")


def session_to_dict(session: Session) -> dict[str, Any]:
    """JSON-ready view of a session handle."""
    return {
        "id": session.id,
        "profile": session.profile.to_dict(),
        "state": session.state.to_dict(),
    }


class SessionHandler:
    """Handlers for the session endpoints.

    ``login`` is mounted outside the authentication gate; ``logout`` and
    ``whoami`` inside it.
    """

    __slots__ = ("_members", "_sessions")

    def __init__(self, sessions: SessionManager, members: MemberManager) -> None:
        self._sessions = sessions
        self._members = members

    async def login(self, request: Request) -> Response:
        data = await read_object(request)
        username = require_str(data, "username")
        password = require_str(data, "password")

        try:
            session, token = await invoke(self._members.login, username, password)
        except (MemberDoesNotExistError, MemberInvalidPasswordError) as err:
            raise Unauthorized("invalid username or password").with_internal_err(err) from err
        except SessionLoginDisabledError as err:
            raise Forbidden("login is disabled for this session") from err
        except SessionLoginsLockedError as err:
            raise Forbidden("logins are locked") from err

        logger.info("login: member %r, session %s", username, session.id)

        body = session_to_dict(session)
        if not self._sessions.cookie_enabled():
            body["token"] = token
            return json_response(body)
        return self._sessions.cookie_set_token(json_response(body), token)

    async def logout(self, request: Request) -> Response:
        session = get_session(request)
        await invoke(self._members.logout, session.id)
        logger.info("logout: session %s", session.id)

        response = json_response(True)
        if self._sessions.cookie_enabled():
            response = self._sessions.cookie_clear_token(response, request)
        return response

    async def whoami(self, request: Request) -> dict[str, Any]:
        return session_to_dict(get_session(request))
