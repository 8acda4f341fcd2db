"""Request-scoped access to the objects created at application startup."""

from typing import Optional

from fastapi import Depends, Query, Request

from closet_filter.api.config import Settings
from closet_filter.errors import ValidationError
from closet_filter.filters.manager import FilterManager
from closet_filter.services.search import ItemSearchService
from closet_filter.store.repository import ItemRepository


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_repository(request: Request) -> ItemRepository:
    return request.app.state.repository


def get_filter_manager(request: Request) -> FilterManager:
    return request.app.state.filter_manager


def get_search_service(request: Request) -> ItemSearchService:
    return request.app.state.search_service


def get_page_limit(
    limit: Optional[int] = Query(None, ge=1, description="Max items to return"),
    settings: Settings = Depends(get_app_settings),
) -> int:
    """Requested page size, defaulted and capped by the app settings."""
    if limit is None:
        return settings.default_page_size
    if limit > settings.max_page_size:
        raise ValidationError(f"limit must be at most {settings.max_page_size}", field="limit")
    return limit
