"""Case-insensitive, read-only HTTP request headers.

Built from the raw ASGI ``headers`` list. Names are lowercased once at
construction so lookups are plain dict hits.
"""

from collections.abc import Iterator, Mapping


class Headers(Mapping[str, str]):
    """Read-only request headers keyed by lowercased name.

    ``headers["X-Foo"]`` returns the first value sent for that header.
    ``get_list("cookie")`` returns every value, in arrival order.
    """

    __slots__ = ("_raw", "_values")

    def __init__(self, raw: tuple[tuple[bytes, bytes], ...] = ()) -> None:
        values: dict[str, list[str]] = {}
        for name, value in raw:
            values.setdefault(name.decode("latin-1").lower(), []).append(
                value.decode("latin-1")
            )
        self._raw = raw
        self._values = values

    def __getitem__(self, key: str) -> str:
        try:
            return self._values[key.lower()][0]
        except KeyError:
            raise KeyError(key) from None

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Headers({ {k: self[k] for k in self}!r})"

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key* (empty list when absent)."""
        return list(self._values.get(key.lower(), ()))

    @property
    def raw(self) -> tuple[tuple[bytes, bytes], ...]:
        """The original ASGI byte pairs."""
        return self._raw
