"""Federated modpack search endpoint."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from catalog.aggregator import CatalogAggregator
from catalog.models import SearchFilters, SearchRequest, SearchResponse
from dependencies import get_catalog_aggregator
from exceptions import SourceUnavailableError, ValidationError

logger = logging.getLogger(__name__)
router = APIRouter(tags=["search"])


def build_search_request(
    query: str,
    platform: str,
    mod_loader: Optional[str],
    minecraft_version: Optional[str],
    sort_by: str,
    limit: int,
    offset: int,
) -> SearchRequest:
    """Validate raw query parameters into a SearchRequest."""
    try:
        return SearchRequest(
            query=query,
            scope=platform,
            filters=SearchFilters(mod_loader=mod_loader, game_version=minecraft_version),
            sort_key=sort_by,
            limit=limit,
            offset=offset,
        )
    except PydanticValidationError as e:
        raise ValidationError(
            "Invalid search parameters",
            detail={
                "errors": [
                    {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
                    for err in e.errors()
                ]
            },
        ) from e


@router.get("/api/search", response_model=SearchResponse)
async def search_modpacks(
    query: str = "",
    platform: str = "all",
    mod_loader: Optional[str] = Query(None, alias="modLoader"),
    minecraft_version: Optional[str] = Query(None, alias="minecraftVersion"),
    sort_by: str = Query("downloads", alias="sortBy"),
    limit: int = 20,
    offset: int = 0,
    aggregator: CatalogAggregator = Depends(get_catalog_aggregator),
):
    try:
        search_request = build_search_request(
            query, platform, mod_loader, minecraft_version, sort_by, limit, offset
        )
    except ValidationError as e:
        return JSONResponse(status_code=e.status_code, content=e.to_dict())

    try:
        return await aggregator.search_response(search_request)
    except SourceUnavailableError as e:
        logger.warning(
            "Pinned search source failed",
            extra={"source": e.source, "error_message": e.message},
        )
        return JSONResponse(status_code=e.status_code, content=e.to_dict())
