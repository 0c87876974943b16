"""Minimal ASGI responses."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter

if TYPE_CHECKING:
    from routely._types import Send

_ANY = TypeAdapter(Any)


class Response:
    """A complete HTTP response sent in one body message."""

    __slots__ = ("body", "headers", "media_type", "status_code")

    def __init__(
        self,
        body: bytes | str = b"",
        status_code: int = 200,
        headers: dict[str, str] | None = None,
        media_type: str = "text/plain; charset=utf-8",
    ) -> None:
        self.body = body.encode("utf-8") if isinstance(body, str) else body
        self.status_code = status_code
        self.headers = dict(headers or {})
        self.media_type = media_type

    def raw_headers(self) -> list[tuple[bytes, bytes]]:
        headers = {"content-type": self.media_type, **self.headers}
        headers["content-length"] = str(len(self.body))
        return [(k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in headers.items()]

    async def send(self, send: Send) -> None:
        await send(
            {
                "type": "http.response.start",
                "status": self.status_code,
                "headers": self.raw_headers(),
            }
        )
        await send({"type": "http.response.body", "body": self.body})


class JSONResponse(Response):
    """JSON body. Pydantic models, UUIDs and dates are serialized by pydantic."""

    __slots__ = ()

    def __init__(
        self,
        content: Any,
        status_code: int = 200,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(
            _ANY.dump_json(content),
            status_code=status_code,
            headers=headers,
            media_type="application/json",
        )
