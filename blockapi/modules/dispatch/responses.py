"""
Handler result normalization.

A handler may return any JSON-encodable value, None, a RawResponse or a
ready-made Starlette Response. The value is first tagged (JsonResult or
RawResponse) and then rendered; nothing else in the runtime inspects handler
return values.
"""

from dataclasses import dataclass
from typing import Any, Union

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette.responses import Response

from ..capability import RawResponse


@dataclass(frozen=True)
class JsonResult:
    """Plain handler value, sent as JSON."""

    value: Any
    status: int = 200


HandlerResult = Union[JsonResult, RawResponse]

SUCCESS_BODY = {"success": True}


def normalize_result(value: Any) -> Union[HandlerResult, Response]:
    """Tag a handler return value."""
    if isinstance(value, (JsonResult, RawResponse, Response)):
        return value
    if value is None:
        return JsonResult(SUCCESS_BODY)
    return JsonResult(value)


def render_result(result: Union[HandlerResult, Response]) -> Response:
    """Turn a tagged result into the HTTP response."""
    if isinstance(result, Response):
        return result

    if isinstance(result, RawResponse):
        headers = dict(result.headers or {})
        media_type = result.media_type
        if media_type is None and not any(key.lower() == "content-type" for key in headers):
            media_type = "text/plain" if isinstance(result.body, str) else "application/octet-stream"
        return Response(
            content=result.body,
            status_code=result.status,
            headers=headers,
            media_type=media_type,
        )

    return JSONResponse(status_code=result.status, content=jsonable_encoder(result.value))
