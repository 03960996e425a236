"""QueryService — ``GET ?q=...`` on the Micropub endpoint."""

from __future__ import annotations

from micropress.domain.errors import NotFoundError
from micropress.services.base import BaseService
from micropress.services.posts import PostService
from micropress.services.result import ServiceResult


class QueryService(BaseService):
    """Answers ``q=config``, ``q=syndicate-to`` and ``q=source``."""

    def query(
        self,
        q: str,
        params: list[tuple[str, str]],
        origin: str,
    ) -> ServiceResult:
        """Dispatch on *q*. Unknown query types are ``NOT_FOUND``."""
        op = f"query_{q}"
        micropub = self._site.settings.micropub

        if q == "config":
            return ServiceResult(
                ok=True,
                op=op,
                data={
                    "media-endpoint": f"{origin}{micropub.media_endpoint}",
                    "syndicate-to": list(micropub.syndicate_to),
                },
            )
        if q == "syndicate-to":
            return ServiceResult(
                ok=True,
                op=op,
                data={"syndicate-to": list(micropub.syndicate_to)},
            )
        if q == "source":
            return self._source(params)

        return ServiceResult.from_exception("query", NotFoundError(f"Unknown query: {q!r}"))

    def _source(self, params: list[tuple[str, str]]) -> ServiceResult:
        url = next((value for key, value in params if key == "url"), None)
        if not url:
            return ServiceResult.failure("query_source", "INVALID_REQUEST", "Missing url")
        wanted = [value for key, value in params if key in ("properties", "properties[]")]
        return PostService(self._site).source(url, wanted or None)
