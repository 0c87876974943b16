"""HTTP verbs understood by the router."""

from __future__ import annotations

from enum import Enum

from routely.errors import UnknownVerb


class Verb(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    OPTIONS = "OPTIONS"
    HEAD = "HEAD"
    TRACE = "TRACE"
    CONNECT = "CONNECT"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: str | Verb) -> Verb:
        """Convert a transport's method string into a :class:`Verb`.

        Matching is case-insensitive. Raises :class:`UnknownVerb` for
        anything outside the closed set.
        """
        if isinstance(value, Verb):
            return value
        try:
            return cls(value.upper())
        except (ValueError, AttributeError):
            msg = f"Unsupported HTTP verb: {value!r}"
            raise UnknownVerb(msg) from None
