"""HTTP API: authentication gate, route registry and the member/room handlers."""

from roomgate.api.manager import ApiManager
from roomgate.api.members import MembersHandler
from roomgate.api.room import RoomHandler
from roomgate.api.session import SessionHandler, session_to_dict

__all__ = [
    "ApiManager",
    "MembersHandler",
    "RoomHandler",
    "SessionHandler",
    "session_to_dict",
]
