"""Cookie parsing and ``Set-Cookie`` serialization.

The read side feeds ``Request.cookies``; the write side is shared by
``Response`` and ``HTTPError`` so an error response can still clear or
set a session cookie.
"""

from dataclasses import dataclass


def parse_cookies(header: str) -> dict[str, str]:
    """Parse a ``Cookie`` header value into a name-value dict.

    Malformed pairs are skipped rather than failing the whole header.
    """
    if not header:
        return {}
    cookies: dict[str, str] = {}
    for pair in header.split(";"):
        name, sep, value = pair.strip().partition("=")
        if not sep or not name:
            continue
        cookies[name.strip()] = value.strip().strip('"')
    return cookies


@dataclass(frozen=True, slots=True)
class SetCookie:
    """A ``Set-Cookie`` directive attached to a response."""

    name: str
    value: str
    max_age: int | None = None
    path: str = "/"
    domain: str | None = None
    secure: bool = False
    httponly: bool = True
    samesite: str = "lax"

    @property
    def is_deletion(self) -> bool:
        """True when this directive expires the cookie immediately."""
        return self.max_age == 0

    def to_header_value(self) -> str:
        """Serialize to a ``Set-Cookie`` header value string."""
        attrs = [f"{self.name}={self.value}"]
        if self.max_age is not None:
            attrs.append(f"Max-Age={self.max_age}")
        if self.path:
            attrs.append(f"Path={self.path}")
        if self.domain:
            attrs.append(f"Domain={self.domain}")
        attrs.extend(
            flag for flag, on in (("Secure", self.secure), ("HttpOnly", self.httponly)) if on
        )
        if self.samesite:
            attrs.append(f"SameSite={self.samesite.capitalize()}")
        return "; ".join(attrs)
