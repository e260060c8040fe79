"""
Conditional JSON responses with weak ETags.
"""
from typing import Any, Dict, Optional
import hashlib

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse

LEADERBOARD_CACHE_CONTROL = "public, max-age=30, s-maxage=60, stale-while-revalidate=300"


def _strip_weak(tag: str) -> str:
    tag = tag.strip()
    return tag[2:] if tag.startswith("W/") else tag


def etag_matches(if_none_match: Optional[str], etag: str) -> bool:
    """Weak comparison against an If-None-Match header value."""
    if not if_none_match:
        return False
    candidates = [c.strip() for c in if_none_match.split(",")]
    return "*" in candidates or _strip_weak(etag) in {_strip_weak(c) for c in candidates}


def json_with_etag(
    request: Request,
    content: Any,
    headers: Optional[Dict[str, str]] = None,
) -> Response:
    """
    Render content as JSON tagged with a hash of the body.

    Returns 304 with an empty body when the client already holds it.
    """
    response = JSONResponse(content=content, headers=headers)
    etag = f'W/"{hashlib.sha1(response.body).hexdigest()}"'

    if etag_matches(request.headers.get("if-none-match"), etag):
        not_modified_headers = dict(headers or {})
        not_modified_headers["ETag"] = etag
        return Response(status_code=status.HTTP_304_NOT_MODIFIED, headers=not_modified_headers)

    response.headers["ETag"] = etag
    return response
