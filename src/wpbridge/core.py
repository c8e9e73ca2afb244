"""
WordPress Core Service - Typed client for the WordPress REST API (/wp-json/wp/v2).
Handles posts, pages, media, categories, tags, users, settings and custom post types,
with page/total-pages auto-pagination driven by the X-WP-Total headers.
"""

from collections.abc import Mapping
from typing import Any, TypeVar

import aiohttp
from pydantic import BaseModel

from wpbridge.auth import Credentials, auth_headers, wordpress_auth
from wpbridge.errors import AuthenticationError, WordPressAPIError
from wpbridge.filters import (
    DEFAULT_PER_PAGE,
    CategoriesFilter,
    CustomPostFilter,
    MediaFilter,
    PagesFilter,
    PaginationParams,
    PostsFilter,
    TagsFilter,
    UsersFilter,
    filter_to_params,
)
from wpbridge.models import (
    FetchResult,
    PaginatedResponse,
    WordPressAuthor,
    WordPressCategory,
    WordPressMedia,
    WordPressPage,
    WordPressPost,
    WordPressSettings,
    WordPressTag,
)
from wpbridge.utils.base_api_client import APIResponse, BaseAPIClient
from wpbridge.utils.get_logger import get_logger
from wpbridge.utils.pydantic_tools import BaseModelWithMethods

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)
FilterT = TypeVar("FilterT", bound=PaginationParams)

API_PATH = "/wp-json/wp/v2"
EMBED_PARAMS = {"_embed": "true"}


class WordPressClientConfig(BaseModelWithMethods):
    """
    base_url may include a path prefix (e.g. https://example.com/en).
    max_retries=1 means a single attempt; raise it to retry 429/5xx/network errors.
    """

    base_url: str
    auth: Credentials | None = None
    timeout: int = 30
    max_retries: int = 1
    rate_limit_max: int | None = None
    rate_limit_period: float = 1.0


def coerce_filter(filter_cls: type[FilterT], filter: FilterT | Mapping[str, Any] | None) -> FilterT:
    """Validate a loose mapping into the resource's filter type."""
    if filter is None:
        return filter_cls()
    if isinstance(filter, filter_cls):
        return filter
    if isinstance(filter, BaseModel):
        return filter_cls.model_validate(filter.model_dump(exclude_none=True))
    return filter_cls.model_validate(filter)


def _int_header(response: APIResponse, name: str) -> int:
    value = response.header(name, "0") or "0"
    try:
        return int(value)
    except ValueError:
        return 0


class WordPressService(BaseAPIClient):
    """
    Base WordPress service for all REST API read operations.
    Auth (Basic application password or a captured login cookie) is attached to every request.
    """

    def __init__(self, config: WordPressClientConfig):
        if not config.base_url:
            raise ValueError("WordPress base_url is required")

        self.config = config
        self.base_url = config.base_url.rstrip("/")
        self.api_base = f"{self.base_url}{API_PATH}"
        self.auth = config.auth

    @classmethod
    def from_env(cls) -> "WordPressService":
        """Build a client from WP_BASE_URL / WP_USERNAME / WP_APP_PASSWORD."""
        base_url = wordpress_auth.base_url
        if not base_url:
            raise ValueError("WP_BASE_URL is not configured")
        return cls(WordPressClientConfig(base_url=base_url, auth=wordpress_auth.credentials))

    def has_auth(self) -> bool:
        return self.auth is not None

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        json_body: Any = None,
    ) -> APIResponse:
        """Make an HTTP request against the REST API base.

        This method brokers the call to _core_async_request with the client's
        auth, timeout, retry and rate limit settings.

        Raises:
            WordPressAPIError: on network failure (503) or timeout (504)
        """
        url = f"{self.api_base}{endpoint}"
        headers = {"Content-Type": "application/json", **auth_headers(self.auth)}

        try:
            return await self._core_async_request(
                method,
                url,
                params=params,
                headers=headers,
                json_body=json_body,
                timeout=self.config.timeout,
                max_retries=self.config.max_retries,
                rate_limit_max=self.config.rate_limit_max,
                rate_limit_period=self.config.rate_limit_period,
            )
        except TimeoutError as e:
            raise WordPressAPIError(f"WordPress request timed out: {method} {url}", status=504) from e
        except aiohttp.ClientError as e:
            raise WordPressAPIError(f"WordPress request failed: {method} {url}: {e}", status=503) from e

    async def fetch_api_paginated(
        self, endpoint: str, params: dict[str, str] | None = None
    ) -> FetchResult[Any]:
        """Fetch an endpoint and return the body with X-WP-Total / X-WP-TotalPages.

        Missing pagination headers read as 0.

        Raises:
            WordPressAPIError: on any non-2xx response
        """
        response = await self._make_request("GET", endpoint, params=params or {})
        if not response.ok:
            raise WordPressAPIError(
                f"WordPress API error: {response.status} {response.reason}".rstrip(),
                status=response.status,
            )

        return FetchResult[Any](
            data=response.data,
            total=_int_header(response, "X-WP-Total"),
            total_pages=_int_header(response, "X-WP-TotalPages"),
        )

    async def fetch_api(self, endpoint: str, params: dict[str, str] | None = None) -> Any:
        result = await self.fetch_api_paginated(endpoint, params)
        return result.data

    # ------------------------------------------------------------------
    # Generic resource helpers
    # ------------------------------------------------------------------

    async def _get_list(
        self, endpoint: str, filter: PaginationParams, model: type[ModelT], embed: bool = False
    ) -> list[ModelT]:
        params = filter_to_params(filter)
        if embed:
            params.update(EMBED_PARAMS)
        data = await self.fetch_api(endpoint, params)
        return [model.model_validate(item) for item in data or []]

    async def _get_all(
        self,
        endpoint: str,
        filter: PaginationParams,
        model: type[ModelT],
        embed: bool = False,
        per_page: int = DEFAULT_PER_PAGE,
    ) -> list[ModelT]:
        """Walk pages 1..total_pages, preserving upstream order."""
        base = filter.compact_dict(exclude={"page", "per_page"})
        items: list[ModelT] = []
        page = 1

        while True:
            params = filter_to_params({**base, "page": page, "per_page": per_page})
            if embed:
                params.update(EMBED_PARAMS)
            result = await self.fetch_api_paginated(endpoint, params)
            items.extend(model.model_validate(item) for item in result.data or [])
            logger.debug(f"Fetched {endpoint} page {page}/{result.total_pages}")
            page += 1
            if page > result.total_pages:
                break

        return items

    async def _get_paginated(
        self, endpoint: str, filter: PaginationParams, model: type[ModelT], embed: bool = False
    ) -> PaginatedResponse[ModelT]:
        params = filter_to_params(filter)
        if embed:
            params.update(EMBED_PARAMS)
        result = await self.fetch_api_paginated(endpoint, params)
        return PaginatedResponse[model](  # type: ignore[valid-type]
            data=[model.model_validate(item) for item in result.data or []],
            total=result.total,
            total_pages=result.total_pages,
            page=filter.page or 1,
            per_page=filter.per_page or DEFAULT_PER_PAGE,
        )

    async def _get_by_id(
        self, endpoint: str, item_id: int, model: type[ModelT], embed: bool = False
    ) -> ModelT | None:
        try:
            data = await self.fetch_api(f"{endpoint}/{item_id}", dict(EMBED_PARAMS) if embed else None)
        except WordPressAPIError as e:
            if e.status == 404:
                return None
            raise
        return model.model_validate(data)

    async def _get_by_slug(
        self, endpoint: str, slug: str, model: type[ModelT], embed: bool = False
    ) -> ModelT | None:
        params = {"slug": slug, **(EMBED_PARAMS if embed else {})}
        data = await self.fetch_api(endpoint, params)
        if not data:
            return None
        return model.model_validate(data[0])

    # ------------------------------------------------------------------
    # Posts
    # ------------------------------------------------------------------

    async def get_posts(self, filter: PostsFilter | Mapping[str, Any] | None = None) -> list[WordPressPost]:
        """Get a single page of posts (with _embed)."""
        return await self._get_list("/posts", coerce_filter(PostsFilter, filter), WordPressPost, embed=True)

    async def get_all_posts(
        self, filter: PostsFilter | Mapping[str, Any] | None = None, per_page: int = DEFAULT_PER_PAGE
    ) -> list[WordPressPost]:
        """Get every post matching the filter, following pagination."""
        return await self._get_all(
            "/posts", coerce_filter(PostsFilter, filter), WordPressPost, embed=True, per_page=per_page
        )

    async def get_posts_paginated(
        self, filter: PostsFilter | Mapping[str, Any] | None = None
    ) -> PaginatedResponse[WordPressPost]:
        return await self._get_paginated(
            "/posts", coerce_filter(PostsFilter, filter), WordPressPost, embed=True
        )

    async def get_post(self, post_id: int) -> WordPressPost | None:
        return await self._get_by_id("/posts", post_id, WordPressPost, embed=True)

    async def get_post_by_slug(self, slug: str) -> WordPressPost | None:
        return await self._get_by_slug("/posts", slug, WordPressPost, embed=True)

    # ------------------------------------------------------------------
    # Pages
    # ------------------------------------------------------------------

    async def get_pages(self, filter: PagesFilter | Mapping[str, Any] | None = None) -> list[WordPressPage]:
        return await self._get_list("/pages", coerce_filter(PagesFilter, filter), WordPressPage, embed=True)

    async def get_all_pages(
        self, filter: PagesFilter | Mapping[str, Any] | None = None, per_page: int = DEFAULT_PER_PAGE
    ) -> list[WordPressPage]:
        return await self._get_all(
            "/pages", coerce_filter(PagesFilter, filter), WordPressPage, embed=True, per_page=per_page
        )

    async def get_pages_paginated(
        self, filter: PagesFilter | Mapping[str, Any] | None = None
    ) -> PaginatedResponse[WordPressPage]:
        return await self._get_paginated(
            "/pages", coerce_filter(PagesFilter, filter), WordPressPage, embed=True
        )

    async def get_page(self, page_id: int) -> WordPressPage | None:
        return await self._get_by_id("/pages", page_id, WordPressPage, embed=True)

    async def get_page_by_slug(self, slug: str) -> WordPressPage | None:
        return await self._get_by_slug("/pages", slug, WordPressPage, embed=True)

    # ------------------------------------------------------------------
    # Media
    # ------------------------------------------------------------------

    async def get_media(self, filter: MediaFilter | Mapping[str, Any] | None = None) -> list[WordPressMedia]:
        return await self._get_list("/media", coerce_filter(MediaFilter, filter), WordPressMedia)

    async def get_all_media(
        self, filter: MediaFilter | Mapping[str, Any] | None = None, per_page: int = DEFAULT_PER_PAGE
    ) -> list[WordPressMedia]:
        return await self._get_all(
            "/media", coerce_filter(MediaFilter, filter), WordPressMedia, per_page=per_page
        )

    async def get_media_paginated(
        self, filter: MediaFilter | Mapping[str, Any] | None = None
    ) -> PaginatedResponse[WordPressMedia]:
        return await self._get_paginated("/media", coerce_filter(MediaFilter, filter), WordPressMedia)

    async def get_media_item(self, media_id: int) -> WordPressMedia | None:
        return await self._get_by_id("/media", media_id, WordPressMedia)

    async def get_media_by_slug(self, slug: str) -> WordPressMedia | None:
        return await self._get_by_slug("/media", slug, WordPressMedia)

    @staticmethod
    def get_image_url(media: WordPressMedia, size: str = "full") -> str:
        """URL for a named image size, falling back to the original upload."""
        sizes = media.media_details.sizes
        if size == "full" or size not in sizes:
            return media.source_url
        return sizes[size].source_url

    # ------------------------------------------------------------------
    # Categories and tags
    # ------------------------------------------------------------------

    async def get_categories(
        self, filter: CategoriesFilter | Mapping[str, Any] | None = None
    ) -> list[WordPressCategory]:
        return await self._get_list(
            "/categories", coerce_filter(CategoriesFilter, filter), WordPressCategory
        )

    async def get_all_categories(
        self, filter: CategoriesFilter | Mapping[str, Any] | None = None, per_page: int = DEFAULT_PER_PAGE
    ) -> list[WordPressCategory]:
        return await self._get_all(
            "/categories", coerce_filter(CategoriesFilter, filter), WordPressCategory, per_page=per_page
        )

    async def get_categories_paginated(
        self, filter: CategoriesFilter | Mapping[str, Any] | None = None
    ) -> PaginatedResponse[WordPressCategory]:
        return await self._get_paginated(
            "/categories", coerce_filter(CategoriesFilter, filter), WordPressCategory
        )

    async def get_category(self, category_id: int) -> WordPressCategory | None:
        return await self._get_by_id("/categories", category_id, WordPressCategory)

    async def get_category_by_slug(self, slug: str) -> WordPressCategory | None:
        return await self._get_by_slug("/categories", slug, WordPressCategory)

    async def get_tags(self, filter: TagsFilter | Mapping[str, Any] | None = None) -> list[WordPressTag]:
        return await self._get_list("/tags", coerce_filter(TagsFilter, filter), WordPressTag)

    async def get_all_tags(
        self, filter: TagsFilter | Mapping[str, Any] | None = None, per_page: int = DEFAULT_PER_PAGE
    ) -> list[WordPressTag]:
        return await self._get_all("/tags", coerce_filter(TagsFilter, filter), WordPressTag, per_page=per_page)

    async def get_tags_paginated(
        self, filter: TagsFilter | Mapping[str, Any] | None = None
    ) -> PaginatedResponse[WordPressTag]:
        return await self._get_paginated("/tags", coerce_filter(TagsFilter, filter), WordPressTag)

    async def get_tag(self, tag_id: int) -> WordPressTag | None:
        return await self._get_by_id("/tags", tag_id, WordPressTag)

    async def get_tag_by_slug(self, slug: str) -> WordPressTag | None:
        return await self._get_by_slug("/tags", slug, WordPressTag)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def get_users(self, filter: UsersFilter | Mapping[str, Any] | None = None) -> list[WordPressAuthor]:
        return await self._get_list("/users", coerce_filter(UsersFilter, filter), WordPressAuthor)

    async def get_all_users(
        self, filter: UsersFilter | Mapping[str, Any] | None = None, per_page: int = DEFAULT_PER_PAGE
    ) -> list[WordPressAuthor]:
        return await self._get_all(
            "/users", coerce_filter(UsersFilter, filter), WordPressAuthor, per_page=per_page
        )

    async def get_users_paginated(
        self, filter: UsersFilter | Mapping[str, Any] | None = None
    ) -> PaginatedResponse[WordPressAuthor]:
        return await self._get_paginated("/users", coerce_filter(UsersFilter, filter), WordPressAuthor)

    async def get_user(self, user_id: int) -> WordPressAuthor | None:
        return await self._get_by_id("/users", user_id, WordPressAuthor)

    async def get_user_by_slug(self, slug: str) -> WordPressAuthor | None:
        return await self._get_by_slug("/users", slug, WordPressAuthor)

    async def get_current_user(self) -> WordPressAuthor:
        """Get the user the configured credentials belong to.

        Raises:
            AuthenticationError: if the client has no auth configured
        """
        if not self.has_auth():
            raise AuthenticationError(
                "Authentication required for /users/me endpoint. Configure auth in client options."
            )
        data = await self.fetch_api("/users/me")
        return WordPressAuthor.model_validate(data)

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    async def get_settings(self) -> WordPressSettings:
        if not self.has_auth():
            raise AuthenticationError(
                "Authentication required for /settings endpoint. Configure auth in client options."
            )
        data = await self.fetch_api("/settings")
        return WordPressSettings.model_validate(data)

    # ------------------------------------------------------------------
    # Custom post types
    # ------------------------------------------------------------------

    def get_custom_post_type(self, post_type_path: str) -> "CustomPostTypeMethods":
        """Methods bound to a custom post type's rest_base (e.g. "books")."""
        return CustomPostTypeMethods(self, post_type_path)


class CustomPostTypeMethods:
    """Read methods for one custom post type. Items validate as posts, with _embed."""

    def __init__(self, service: WordPressService, post_type_path: str):
        self.service = service
        self.base_path = f"/{post_type_path.lstrip('/')}"

    async def get_items(
        self, filter: CustomPostFilter | Mapping[str, Any] | None = None
    ) -> list[WordPressPost]:
        return await self.service._get_list(
            self.base_path, coerce_filter(CustomPostFilter, filter), WordPressPost, embed=True
        )

    async def get_all_items(
        self, filter: CustomPostFilter | Mapping[str, Any] | None = None, per_page: int = DEFAULT_PER_PAGE
    ) -> list[WordPressPost]:
        return await self.service._get_all(
            self.base_path,
            coerce_filter(CustomPostFilter, filter),
            WordPressPost,
            embed=True,
            per_page=per_page,
        )

    async def get_items_paginated(
        self, filter: CustomPostFilter | Mapping[str, Any] | None = None
    ) -> PaginatedResponse[WordPressPost]:
        return await self.service._get_paginated(
            self.base_path, coerce_filter(CustomPostFilter, filter), WordPressPost, embed=True
        )

    async def get_item(self, item_id: int) -> WordPressPost | None:
        return await self.service._get_by_id(self.base_path, item_id, WordPressPost, embed=True)

    async def get_item_by_slug(self, slug: str) -> WordPressPost | None:
        return await self.service._get_by_slug(self.base_path, slug, WordPressPost, embed=True)


WordPressClient = WordPressService
