"""Test utilities for roomgate applications.

    from roomgate.testing import TestClient, assert_json
"""

from roomgate.testing.assertions import (
    assert_cookie_cleared,
    assert_json,
    assert_status,
    set_cookies,
)
from roomgate.testing.client import TestClient

__all__ = [
    "TestClient",
    "assert_cookie_cleared",
    "assert_json",
    "assert_status",
    "set_cookies",
]
