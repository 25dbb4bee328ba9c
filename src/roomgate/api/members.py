"""Member administration: the ``/members`` and ``/members_bulk`` sub-trees.

Both sub-trees are admin-only and are mounted inside the authenticated
group, so every handler here runs with a session attached.
"""

from typing import Any

from roomgate._internal.invoke import invoke
from roomgate.api.body import read_object, require_str, require_str_list
from roomgate.auth import admins_only
from roomgate.errors import BadRequest, HTTPError, NotFound
from roomgate.http.request import Request
from roomgate.routing.router import Router
from roomgate.types import (
    MemberAlreadyExistsError,
    MemberDoesNotExistError,
    MemberManager,
    MemberProfile,
)

DEFAULT_LIMIT = 100


def _profile_from(data: Any, base: MemberProfile | None = None) -> MemberProfile:
    if not isinstance(data, dict):
        raise BadRequest("'profile' must be an object")
    try:
        return MemberProfile.from_dict(data, base)
    except ValueError as exc:
        raise BadRequest(str(exc)) from exc


class MembersHandler:
    """CRUD over the member store."""

    __slots__ = ("_members",)

    def __init__(self, members: MemberManager) -> None:
        self._members = members

    def route(self, r: Router) -> None:
        r.use(admins_only)
        r.get("/", self.list_members)
        r.post("/", self.create)
        r.get("/{member_id}", self.read)
        r.post("/{member_id}", self.update_profile)
        r.delete("/{member_id}", self.delete)
        r.post("/{member_id}/password", self.update_password)

    def route_bulk(self, r: Router) -> None:
        r.use(admins_only)
        r.post("/update", self.bulk_update)
        r.post("/delete", self.bulk_delete)

    # -- Single member --

    async def list_members(self, request: Request) -> list[dict[str, Any]]:
        limit = request.query.get_int("limit", DEFAULT_LIMIT)
        offset = request.query.get_int("offset", 0)
        if limit is None or offset is None or limit < 0 or offset < 0:
            raise BadRequest("'limit' and 'offset' must be non-negative integers")

        entries = await invoke(self._members.select_all, limit, offset)
        return [{"id": member_id, "profile": profile.to_dict()} for member_id, profile in entries]

    async def create(self, request: Request) -> tuple[dict[str, Any], int]:
        data = await read_object(request)
        username = require_str(data, "username")
        password = require_str(data, "password")
        profile = _profile_from(data.get("profile", {}))

        try:
            member_id = await invoke(self._members.insert, username, password, profile)
        except MemberAlreadyExistsError as err:
            raise HTTPError(422, "member already exists") from err
        return {"id": member_id, "profile": profile.to_dict()}, 201

    async def read(self, member_id: str) -> dict[str, Any]:
        return (await self._select(member_id)).to_dict()

    async def update_profile(self, request: Request, member_id: str) -> None:
        data = await read_object(request)
        profile = _profile_from(data, await self._select(member_id))
        await self._call(self._members.update_profile, member_id, profile)

    async def update_password(self, request: Request, member_id: str) -> None:
        data = await read_object(request)
        password = require_str(data, "password")
        await self._call(self._members.update_password, member_id, password)

    async def delete(self, member_id: str) -> None:
        await self._call(self._members.delete, member_id)

    # -- Bulk --

    async def bulk_update(self, request: Request) -> None:
        """Apply the same profile changes to every member in ``ids``.

        Every id is resolved and validated before the first write, so a
        missing member leaves all profiles untouched.
        """
        data = await read_object(request)
        ids = require_str_list(data, "ids")
        changes = data.get("profile", {})

        updates = [
            (member_id, _profile_from(changes, await self._select(member_id)))
            for member_id in ids
        ]
        for member_id, profile in updates:
            await self._call(self._members.update_profile, member_id, profile)

    async def bulk_delete(self, request: Request) -> None:
        data = await read_object(request)
        ids = require_str_list(data, "ids")
        for member_id in ids:
            await self._select(member_id)
        for member_id in ids:
            await self._call(self._members.delete, member_id)

    # -- Internal --

    async def _select(self, member_id: str) -> MemberProfile:
        return await self._call(self._members.select, member_id)

    async def _call(self, method: Any, member_id: str, *args: Any) -> Any:
        try:
            return await invoke(method, member_id, *args)
        except MemberDoesNotExistError as err:
            raise NotFound(f"member {member_id!r} not found") from err
