"""Base provider query adapter utilities."""

from __future__ import annotations

from catalog.models import ProviderQuery, SearchRequest, SourcePlatform


def build_query_string(request: SearchRequest) -> str:
    return " ".join(term for term in request.query.split() if term)


class ProviderQueryAdapter:
    provider_id: SourcePlatform

    def build_query(self, request: SearchRequest, limit: int) -> ProviderQuery:
        raise NotImplementedError
