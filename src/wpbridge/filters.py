"""
WordPress Filters - Tagged request types per resource and their query-string translation.
"""

import re
from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from wpbridge.utils.pydantic_tools import BaseModelWithMethods

DEFAULT_PER_PAGE = 100

PostStatus = Literal["publish", "draft", "pending", "private", "future", "trash"]
Order = Literal["asc", "desc"]


class PaginationParams(BaseModelWithMethods):
    """Pagination options for list endpoints. Accepts snake_case or camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    per_page: int | None = Field(default=None, ge=1, le=100)
    page: int | None = Field(default=None, ge=1)


class PostsFilter(PaginationParams):
    status: PostStatus | None = None
    categories: list[int] | None = None
    categories_exclude: list[int] | None = None
    tags: list[int] | None = None
    tags_exclude: list[int] | None = None
    author: int | None = None
    author_exclude: list[int] | None = None
    include: list[int] | None = None
    slug: str | None = None
    search: str | None = None
    after: str | None = None  # ISO 8601
    before: str | None = None  # ISO 8601
    sticky: bool | None = None
    orderby: Literal["date", "id", "title", "slug", "modified", "relevance", "author", "include"] | None = None
    order: Order | None = None


class CustomPostFilter(PostsFilter):
    """Posts filter for custom post types; extra keys (custom taxonomies) are forwarded as-is."""

    model_config = ConfigDict(extra="allow")


class PagesFilter(PaginationParams):
    status: PostStatus | None = None
    parent: int | None = None
    parent_exclude: list[int] | None = None
    author: int | None = None
    author_exclude: list[int] | None = None
    slug: str | None = None
    search: str | None = None
    after: str | None = None
    before: str | None = None
    orderby: (
        Literal["date", "id", "title", "slug", "modified", "relevance", "author", "include", "menu_order"]
        | None
    ) = None
    order: Order | None = None


class MediaFilter(PaginationParams):
    media_type: Literal["image", "video", "audio", "application"] | None = None
    mime_type: str | None = None
    author: int | None = None
    author_exclude: list[int] | None = None
    parent: int | None = None
    slug: str | None = None
    search: str | None = None
    after: str | None = None
    before: str | None = None
    orderby: Literal["date", "id", "title", "slug", "modified", "relevance", "author", "include"] | None = None
    order: Order | None = None


class CategoriesFilter(PaginationParams):
    hide_empty: bool | None = None
    parent: int | None = None  # 0 for top-level
    exclude: list[int] | None = None
    include: list[int] | None = None
    slug: str | None = None
    search: str | None = None
    orderby: Literal["id", "name", "slug", "count", "term_group", "include"] | None = None
    order: Order | None = None


class TagsFilter(PaginationParams):
    hide_empty: bool | None = None
    exclude: list[int] | None = None
    include: list[int] | None = None
    slug: str | None = None
    search: str | None = None
    orderby: Literal["id", "name", "slug", "count", "term_group", "include"] | None = None
    order: Order | None = None


class UsersFilter(PaginationParams):
    roles: list[str] | None = None
    exclude: list[int] | None = None
    include: list[int] | None = None
    slug: str | None = None
    search: str | None = None
    orderby: Literal["id", "name", "slug", "email", "url", "registered_date", "include"] | None = None
    order: Order | None = None


def camel_to_snake(key: str) -> str:
    """perPage -> per_page. Keys that are already snake_case are unchanged."""
    return re.sub(r"([A-Z])", r"_\1", key).lower()


def _to_param_value(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ",".join(_to_param_value(v) for v in value)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def filter_to_params(filter: BaseModel | Mapping[str, Any] | None = None) -> dict[str, str]:
    """
    Converts a filter model or mapping to WordPress API query params.

    camelCase keys become snake_case, None values are dropped, lists are
    comma-joined and booleans become "true"/"false". per_page defaults to 100.
    """
    if filter is None:
        items: Mapping[str, Any] = {}
    elif isinstance(filter, BaseModel):
        items = filter.model_dump(exclude_none=True)
    else:
        items = filter

    params: dict[str, str] = {}
    for key, value in items.items():
        if value is None:
            continue
        params[camel_to_snake(key)] = _to_param_value(value)

    params.setdefault("per_page", str(DEFAULT_PER_PAGE))
    return params
