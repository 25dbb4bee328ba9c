"""Tests for roomgate.http and the response path: cookies, headers, query,
request, response, negotiation and the ASGI sender."""

from typing import Any, get_type_hints

import pytest

from roomgate.errors import ConfigurationError
from roomgate.http.cookies import SetCookie, parse_cookies
from roomgate.http.headers import Headers
from roomgate.http.query import QueryParams
from roomgate.http.request import Request
from roomgate.http.response import Response
from roomgate.server.negotiation import negotiate
from roomgate.server.sender import send_response


def _h(*pairs: tuple[str, str]) -> Headers:
    """Shorthand: build Headers from string pairs."""
    return Headers(tuple((k.encode("latin-1"), v.encode("latin-1")) for k, v in pairs))


def _request(body: bytes = b"", **scope: Any) -> Request:
    sent = False

    async def receive() -> dict[str, Any]:
        nonlocal sent
        if sent:
            return {"type": "http.disconnect"}
        sent = True
        return {"type": "http.request", "body": body, "more_body": False}

    base = {"type": "http", "method": "post", "path": "/login", "headers": []}
    return Request.from_asgi({**base, **scope}, receive)


class TestCookies:
    def test_parse(self) -> None:
        assert parse_cookies('a=1; b="two"; broken; =x') == {"a": "1", "b": "two"}

    def test_parse_empty(self) -> None:
        assert parse_cookies("") == {}

    def test_set_cookie_header(self) -> None:
        cookie = SetCookie("ROOMGATE_SESSION", "abc", max_age=3600, secure=True)
        assert cookie.to_header_value() == (
            "ROOMGATE_SESSION=abc; Max-Age=3600; Path=/; Secure; HttpOnly; SameSite=Lax"
        )
        assert cookie.is_deletion is False

    def test_deletion(self) -> None:
        assert SetCookie("s", "", max_age=0).is_deletion is True


class TestHeaders:
    def test_case_insensitive(self) -> None:
        h = _h(("Content-Type", "application/json"))
        assert h["content-type"] == "application/json"
        assert "CONTENT-TYPE" in h

    def test_multiple_values(self) -> None:
        h = _h(("Accept", "a"), ("accept", "b"))
        assert h["accept"] == "a"
        assert h.get_list("Accept") == ["a", "b"]
        assert len(h) == 1

    def test_missing(self) -> None:
        with pytest.raises(KeyError):
            _h()["x-missing"]


class TestQueryParams:
    def test_values(self) -> None:
        q = QueryParams(b"limit=10&tag=a&tag=b&flag=")
        assert q["limit"] == "10"
        assert q.get_list("tag") == ["a", "b"]
        assert q["flag"] == ""

    def test_get_int(self) -> None:
        q = QueryParams(b"limit=10&offset=x")
        assert q.get_int("limit") == 10
        assert q.get_int("offset", 0) == 0
        assert q.get_int("missing", 5) == 5


class TestRequest:
    def test_from_asgi(self) -> None:
        request = _request(
            headers=[(b"cookie", b"ROOMGATE_SESSION=t1"), (b"content-type", b"application/json")],
            query_string=b"a=1",
        )
        assert request.method == "POST"
        assert request.cookies == {"ROOMGATE_SESSION": "t1"}
        assert request.content_type == "application/json"
        assert request.url == "/login?a=1"

    async def test_json_body(self) -> None:
        request = _request(b'{"username": "alice"}')
        assert await request.json() == {"username": "alice"}

    async def test_body_cached_across_derived_requests(self) -> None:
        request = _request(b"payload")
        assert await request.body() == b"payload"
        derived = request.with_context("k", "v")
        assert await derived.text() == "payload"

    def test_with_context_is_immutable(self) -> None:
        request = _request()
        derived = request.with_context("roomgate.session", "s1")
        assert derived.context["roomgate.session"] == "s1"
        assert "roomgate.session" not in request.context
        with pytest.raises(TypeError):
            derived.context["other"] = 1  # type: ignore[index]

    def test_with_path_params(self) -> None:
        request = _request().with_path_params({"member_id": "m1"})
        assert request.path_params == {"member_id": "m1"}


class TestResponse:
    def test_chain(self) -> None:
        response = (
            Response("hi")
            .with_status(201)
            .with_header("X-A", "1")
            .with_headers({"X-B": "2"})
            .with_content_type("text/csv")
        )
        assert response.status == 201
        assert response.header("x-a") == "1"
        assert response.header("X-B") == "2"
        assert response.content_type == "text/csv"

    def test_cookies(self) -> None:
        response = Response().with_cookie("a", "1").without_cookie("b")
        assert [c.name for c in response.cookies] == ["a", "b"]
        assert response.cookies[1].is_deletion

    def test_body_helpers(self) -> None:
        assert Response("é").body_bytes == "é".encode()
        assert Response(b"ok").text == "ok"

    def test_self_referencing_annotations_resolve(self) -> None:
        assert get_type_hints(Response.with_status)["return"] is Response
        assert get_type_hints(Request.with_context)["return"] is Request


class TestNegotiate:
    def test_passthrough(self) -> None:
        response = Response("x")
        assert negotiate(response) is response

    def test_none_is_204(self) -> None:
        assert negotiate(None).status == 204

    def test_str_and_bytes(self) -> None:
        assert negotiate("hi").content_type.startswith("text/plain")
        assert negotiate(b"\x00").content_type == "application/octet-stream"

    @pytest.mark.parametrize("value", [{"a": 1}, [1, 2], True])
    def test_json(self, value: Any) -> None:
        response = negotiate(value)
        assert response.content_type == "application/json"

    def test_compact_json(self) -> None:
        assert negotiate({"a": [1, 2]}).text == '{"a":[1,2]}'

    def test_status_tuple(self) -> None:
        response = negotiate(({"id": "m4"}, 201))
        assert response.status == 201
        assert response.content_type == "application/json"

    def test_unsupported(self) -> None:
        with pytest.raises(ConfigurationError, match="object"):
            negotiate(object())


class TestSender:
    async def _send(self, response: Response, **kwargs: Any) -> list[dict[str, Any]]:
        messages: list[dict[str, Any]] = []

        async def send(message: dict[str, Any]) -> None:
            messages.append(message)

        await send_response(response, send, **kwargs)
        return messages

    async def test_headers_and_cookies(self) -> None:
        response = Response("true").with_header("X-A", "1").with_cookie("s", "t")
        start, body = await self._send(response)

        headers = start["headers"]
        assert (b"x-a", b"1") in headers
        assert (b"set-cookie", b"s=t; Path=/; HttpOnly; SameSite=Lax") in headers
        assert (b"content-length", b"4") in headers
        assert body["body"] == b"true"

    async def test_204_has_no_body_or_content_type(self) -> None:
        start, body = await self._send(Response(status=204))
        assert all(name != b"content-type" for name, _ in start["headers"])
        assert body["body"] == b""

    async def test_head_keeps_length_but_drops_body(self) -> None:
        start, body = await self._send(Response("true"), head=True)
        assert (b"content-length", b"4") in start["headers"]
        assert body["body"] == b""
