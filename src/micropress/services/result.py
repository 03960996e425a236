"""ServiceResult: what every service method returns.

Failures carry a :class:`ServiceError` whose ``code`` comes from the error
taxonomy in :mod:`micropress.domain.errors` (plus ``IO_ERROR`` for
filesystem failures). The request handler turns codes into status codes;
services never raise past their own boundary.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from micropress.domain.errors import MicropubError


class ServiceError(BaseModel):
    model_config = {"frozen": True}

    code: str
    message: str
    # Context for logs, e.g. the offending url.
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of one service operation.

    Attributes:
        ok: True on success; ``error`` is then None.
        op: Operation name, e.g. ``"create_post"``.
        data: Payload on success (``location``, ``path``...).
        warnings: Non-fatal problems, such as a failing plugin hook.
        error: Set when ``ok`` is False.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None

    @classmethod
    def failure(cls, op: str, code: str, message: str, **detail: Any) -> ServiceResult:
        return cls(ok=False, op=op, error=ServiceError(code=code, message=message, detail=detail))

    @classmethod
    def from_exception(cls, op: str, exc: MicropubError) -> ServiceResult:
        """Failure carrying *exc*'s taxonomy code and message."""
        return cls.failure(op, exc.code, str(exc))

    @property
    def code(self) -> str | None:
        """The error code, or None on success."""
        return self.error.code if self.error else None

    def as_op(self, op: str, *, warnings: list[str] | None = None) -> ServiceResult:
        """Re-label a nested result as part of *op*, prepending *warnings*."""
        return self.model_copy(update={"op": op, "warnings": [*(warnings or []), *self.warnings]})
