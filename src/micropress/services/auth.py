"""Access-token extraction.

Only presence rules live here: a token arrives either in the
``Authorization`` header or in an ``access_token`` form field, never both.
Whether the token is *valid* is the identity provider's call.
"""

from __future__ import annotations

import logging

from micropress.domain.errors import TokenConflictError, UnauthorizedError
from micropress.domain.normalize import get_field
from micropress.domain.requests import FormBody, MicropubRequest, MultipartBody
from micropress.services.result import ServiceResult

logger = logging.getLogger(__name__)

OP = "extract_token"


def _token_from_header(value: str | None) -> str | None:
    """``Bearer abc`` -> ``abc``. A header without a scheme is taken as-is."""
    if not value:
        return None
    parts = value.strip().split(None, 1)
    if not parts:
        return None
    if len(parts) == 1:
        return None if parts[0].lower() == "bearer" else parts[0]
    return parts[1].strip() or None


def _token_from_body(request: MicropubRequest) -> str | None:
    if not isinstance(request.body, FormBody | MultipartBody):
        return None
    return get_field(request.body, "access_token") or None


def extract_access_token(request: MicropubRequest) -> ServiceResult:
    """Find the bearer token for *request*.

    Returns ``data={"token": ...}`` on success, ``TOKEN_CONFLICT`` when the
    token is in both places, ``UNAUTHORIZED`` when it is in neither.
    """
    from_header = _token_from_header(request.header("authorization"))
    from_body = _token_from_body(request)
    logger.debug("Token sources: header=%s body=%s", bool(from_header), bool(from_body))

    if from_header and from_body:
        return ServiceResult.from_exception(
            OP,
            TokenConflictError(
                "Access token not allowed in both header and body at the same time"
            ),
        )
    token = from_header or from_body
    if not token:
        return ServiceResult.from_exception(OP, UnauthorizedError("No access token provided"))
    return ServiceResult(ok=True, op=OP, data={"token": token})
