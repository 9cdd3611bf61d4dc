"""Source adapter interface and the shared HTTP helper for catalog APIs."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional, Union

import httpx

from catalog.models import ListingPage, SearchPage, SortKey, SourcePlatform
from exceptions import SourceUnavailableError

logger = logging.getLogger(__name__)


class CatalogProvider(ABC):
    """One searchable source of modpack listings."""

    platform: SourcePlatform

    @abstractmethod
    async def search(
        self,
        query: str,
        facets: List[List[str]],
        sort_index: Union[str, int],
        offset: int,
        limit: int,
        *,
        filters: Optional[Mapping[str, Union[str, int]]] = None,
    ) -> SearchPage:
        pass

    @abstractmethod
    async def page(
        self,
        sort_field: SortKey,
        sort_order: str,
        page_size: int,
        offset: int,
    ) -> ListingPage:
        pass


class HttpCatalogProvider(CatalogProvider):
    """Base for upstream APIs reached through a caller-owned httpx.AsyncClient."""

    def __init__(self, client: httpx.AsyncClient, base_url: str):
        self.client = client
        self.base_url = base_url.rstrip("/")

    def _headers(self) -> Dict[str, str]:
        return {"Accept": "application/json"}

    async def _get_json(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        source = self.platform.value
        url = f"{self.base_url}{path}"
        try:
            response = await self.client.get(url, params=params, headers=self._headers())
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            raise SourceUnavailableError(
                f"{self.platform.display_name} API error: {e.response.status_code}",
                source=source,
                detail={"status_code": e.response.status_code},
                cause=e,
            ) from e
        except httpx.HTTPError as e:
            raise SourceUnavailableError(
                f"{self.platform.display_name} request failed: {type(e).__name__}",
                source=source,
                cause=e,
            ) from e
        except ValueError as e:
            raise SourceUnavailableError(
                f"{self.platform.display_name} returned invalid JSON",
                source=source,
                cause=e,
            ) from e

        if not isinstance(payload, dict):
            raise SourceUnavailableError(
                f"{self.platform.display_name} returned an unexpected payload",
                source=source,
            )
        return payload
