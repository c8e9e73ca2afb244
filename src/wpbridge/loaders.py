"""
WordPress Loaders - Adapters from WordPressService to a host framework's collection contract.

Static loaders run at build time: fetch every item, clear the host's store and refill it.
Live loaders run per request: `load_collection` / `load_entry` never raise, they return
CollectionResult / EntryResult with `error` and `status_code` set instead.
"""

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, Generic, Literal, Protocol, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError

from wpbridge.auth import Credentials
from wpbridge.core import WordPressClientConfig, WordPressService
from wpbridge.errors import WordPressAPIError
from wpbridge.filters import DEFAULT_PER_PAGE, Order, PostStatus
from wpbridge.models import (
    CollectionResult,
    EntryResult,
    LiveEntry,
    WordPressContent,
    WordPressModel,
)
from wpbridge.utils.get_logger import get_logger
from wpbridge.utils.pydantic_tools import BaseModelWithMethods

logger = get_logger(__name__)


class WordPressLoaderConfig(BaseModelWithMethods):
    base_url: str
    auth: Credentials | None = None

    def client_config(self) -> WordPressClientConfig:
        return WordPressClientConfig(base_url=self.base_url, auth=self.auth)


class WordPressStaticLoaderConfig(WordPressLoaderConfig):
    """`params` are filter fields applied to every page fetch (e.g. {"status": "publish"})."""

    per_page: int = DEFAULT_PER_PAGE
    params: dict[str, Any] | None = None


# ============================================================================
# Live loader filters (one per resource, validated at the boundary)
# ============================================================================


class LiveFilter(BaseModelWithMethods):
    model_config = ConfigDict(extra="forbid")

    id: int | None = None
    slug: str | None = None

    def collection_params(self) -> dict[str, Any]:
        """Filter fields forwarded to the list endpoint (id/slug select single entries)."""
        return self.compact_dict(exclude={"id", "slug"})


class PostFilter(LiveFilter):
    status: PostStatus | None = None
    categories: list[int] | None = None
    tags: list[int] | None = None
    search: str | None = None
    orderby: Literal["date", "id", "title", "slug", "modified", "relevance"] | None = None
    order: Order | None = None


class PageFilter(LiveFilter):
    status: PostStatus | None = None


class MediaEntryFilter(LiveFilter):
    pass


class CategoryFilter(LiveFilter):
    taxonomy: str | None = None  # "post_tag" reads tags
    hide_empty: bool | None = None
    parent: int | None = None
    orderby: Literal["id", "name", "slug", "count", "term_group"] | None = None
    order: Order | None = None

    def collection_params(self) -> dict[str, Any]:
        params = self.compact_dict(exclude={"id", "slug", "taxonomy"})
        if self.is_tag:
            params.pop("parent", None)
        return params

    @property
    def is_tag(self) -> bool:
        return self.taxonomy == "post_tag"


class UserFilter(LiveFilter):
    roles: list[str] | None = None
    orderby: Literal["id", "name", "slug", "email", "url", "registered_date"] | None = None
    order: Order | None = None


FilterT = TypeVar("FilterT", bound=LiveFilter)
ItemT = TypeVar("ItemT", bound=WordPressModel)


def _unwrap_filter(filter: Any) -> Any:
    """Accept both {"id": 1} and {"filter": {"id": 1}}."""
    if isinstance(filter, Mapping) and isinstance(filter.get("filter"), Mapping):
        return filter["filter"]
    return filter


def _rendered(item: WordPressModel) -> dict[str, str] | None:
    if isinstance(item, WordPressContent):
        return {"html": item.content.rendered or ""}
    return None


# ============================================================================
# Live loaders
# ============================================================================


class LiveLoader(Generic[FilterT, ItemT]):
    """
    Runtime loader for one resource.

    fetch_collection(filter) returns a page of items; fetch_by_id / fetch_by_slug return
    one item or None.
    """

    def __init__(
        self,
        name: str,
        label: str,
        filter_cls: type[FilterT],
        fetch_collection: Callable[[FilterT], Awaitable[list[ItemT]]],
        fetch_by_id: Callable[[FilterT, int], Awaitable[ItemT | None]],
        fetch_by_slug: Callable[[FilterT, str], Awaitable[ItemT | None]],
    ):
        self.name = name
        self.label = label
        self.filter_cls = filter_cls
        self._fetch_collection = fetch_collection
        self._fetch_by_id = fetch_by_id
        self._fetch_by_slug = fetch_by_slug

    def _parse_filter(self, filter: Any) -> FilterT:
        filter = _unwrap_filter(filter)
        if filter is None:
            return self.filter_cls()
        if isinstance(filter, self.filter_cls):
            return filter
        if isinstance(filter, BaseModel):
            filter = filter.model_dump(exclude_none=True)
        return self.filter_cls.model_validate(filter)

    async def load_collection(self, filter: Any = None) -> CollectionResult:
        try:
            parsed = self._parse_filter(filter)
        except ValidationError as e:
            logger.warning(f"{self.name}: invalid collection filter: {e}")
            return CollectionResult(error=str(e), status_code=400)

        try:
            items = await self._fetch_collection(parsed)
            entries = [LiveEntry(id=str(item.id), data=item.to_api_dict()) for item in items]
            return CollectionResult(entries=entries)
        except WordPressAPIError as e:
            logger.error(f"{self.name}: failed to load {self.label} collection: {e.message}")
            return CollectionResult(error=e.message, status_code=e.status)
        except Exception as e:
            logger.error(f"{self.name}: failed to load {self.label} collection: {e}")
            return CollectionResult(error=str(e), status_code=500)

    async def load_entry(self, filter: Any) -> EntryResult:
        """Look up one entry by id, falling back to slug."""
        try:
            parsed = self._parse_filter(filter)
        except ValidationError as e:
            logger.warning(f"{self.name}: invalid entry filter: {e}")
            return EntryResult(error=str(e), status_code=400)

        try:
            item: ItemT | None = None
            if parsed.id:
                item = await self._fetch_by_id(parsed, parsed.id)
            elif parsed.slug:
                item = await self._fetch_by_slug(parsed, parsed.slug)

            if item is None:
                return EntryResult(error=f"{self.label.capitalize()} not found", status_code=404)

            return EntryResult(
                id=str(item.id),
                data=item.to_api_dict(),
                rendered=_rendered(item),
            )
        except WordPressAPIError as e:
            logger.error(f"{self.name}: failed to load {self.label}: {e.message}")
            return EntryResult(error=e.message, status_code=e.status)
        except Exception as e:
            logger.error(f"{self.name}: failed to load {self.label}: {e}")
            return EntryResult(error=str(e), status_code=500)


def wordpress_post_loader(config: WordPressLoaderConfig) -> LiveLoader[PostFilter, Any]:
    client = WordPressService(config.client_config())
    return LiveLoader(
        name="wordpress-post-loader",
        label="post",
        filter_cls=PostFilter,
        fetch_collection=lambda f: client.get_posts(f.collection_params()),
        fetch_by_id=lambda f, item_id: client.get_post(item_id),
        fetch_by_slug=lambda f, slug: client.get_post_by_slug(slug),
    )


def wordpress_page_loader(config: WordPressLoaderConfig) -> LiveLoader[PageFilter, Any]:
    client = WordPressService(config.client_config())
    return LiveLoader(
        name="wordpress-page-loader",
        label="page",
        filter_cls=PageFilter,
        fetch_collection=lambda f: client.get_pages(f.collection_params()),
        fetch_by_id=lambda f, item_id: client.get_page(item_id),
        fetch_by_slug=lambda f, slug: client.get_page_by_slug(slug),
    )


def wordpress_media_loader(config: WordPressLoaderConfig) -> LiveLoader[MediaEntryFilter, Any]:
    client = WordPressService(config.client_config())
    return LiveLoader(
        name="wordpress-media-loader",
        label="media",
        filter_cls=MediaEntryFilter,
        fetch_collection=lambda f: client.get_media(),
        fetch_by_id=lambda f, item_id: client.get_media_item(item_id),
        fetch_by_slug=lambda f, slug: client.get_media_by_slug(slug),
    )


def wordpress_category_loader(config: WordPressLoaderConfig) -> LiveLoader[CategoryFilter, Any]:
    client = WordPressService(config.client_config())

    async def fetch_collection(f: CategoryFilter) -> list[Any]:
        if f.is_tag:
            return await client.get_tags(f.collection_params())
        return await client.get_categories(f.collection_params())

    async def fetch_by_id(f: CategoryFilter, item_id: int) -> Any:
        return await (client.get_tag(item_id) if f.is_tag else client.get_category(item_id))

    async def fetch_by_slug(f: CategoryFilter, slug: str) -> Any:
        return await (client.get_tag_by_slug(slug) if f.is_tag else client.get_category_by_slug(slug))

    return LiveLoader(
        name="wordpress-category-loader",
        label="category",
        filter_cls=CategoryFilter,
        fetch_collection=fetch_collection,
        fetch_by_id=fetch_by_id,
        fetch_by_slug=fetch_by_slug,
    )


def wordpress_user_loader(config: WordPressLoaderConfig) -> LiveLoader[UserFilter, Any]:
    client = WordPressService(config.client_config())
    return LiveLoader(
        name="wordpress-user-loader",
        label="user",
        filter_cls=UserFilter,
        fetch_collection=lambda f: client.get_users(f.collection_params()),
        fetch_by_id=lambda f, item_id: client.get_user(item_id),
        fetch_by_slug=lambda f, slug: client.get_user_by_slug(slug),
    )


def wordpress_custom_post_loader(config: WordPressLoaderConfig, post_type: str) -> LiveLoader[PostFilter, Any]:
    methods = WordPressService(config.client_config()).get_custom_post_type(post_type)
    return LiveLoader(
        name=f"wordpress-{post_type}-loader",
        label="item",
        filter_cls=PostFilter,
        fetch_collection=lambda f: methods.get_items(f.collection_params()),
        fetch_by_id=lambda f, item_id: methods.get_item(item_id),
        fetch_by_slug=lambda f, slug: methods.get_item_by_slug(slug),
    )


# ============================================================================
# Static loaders
# ============================================================================


class DataStore(Protocol):
    """The host's build-time collection store."""

    def clear(self) -> None: ...

    def set(self, *, id: str, data: dict[str, Any], rendered: dict[str, str] | None = None) -> Any: ...


class StaticLoader:
    """Build-time loader: fetch everything, then replace the store's contents."""

    def __init__(self, name: str, label: str, fetch_all: Callable[[], Awaitable[list[Any]]]):
        self.name = name
        self.label = label
        self._fetch_all = fetch_all

    async def load(self, store: DataStore, logger: logging.Logger | None = None) -> None:
        log = logger or get_logger(__name__)
        log.info(f"Loading WordPress {self.label}...")

        try:
            items = await self._fetch_all()

            store.clear()
            for item in items:
                rendered = _rendered(item)
                if rendered is None:
                    store.set(id=str(item.id), data=item.to_api_dict())
                else:
                    store.set(id=str(item.id), data=item.to_api_dict(), rendered=rendered)

            log.info(f"Loaded {len(items)} {self.label}")
        except Exception as e:
            log.error(f"Failed to load {self.label}: {e}")
            raise


def _static_loader(
    config: WordPressStaticLoaderConfig, name: str, label: str, fetch_all: Callable[..., Awaitable[list[Any]]]
) -> StaticLoader:
    async def run() -> list[Any]:
        return await fetch_all(config.params, per_page=config.per_page)

    return StaticLoader(name=name, label=label, fetch_all=run)


def wordpress_post_static_loader(config: WordPressStaticLoaderConfig) -> StaticLoader:
    client = WordPressService(config.client_config())
    return _static_loader(config, "wordpress-post-static-loader", "posts", client.get_all_posts)


def wordpress_page_static_loader(config: WordPressStaticLoaderConfig) -> StaticLoader:
    client = WordPressService(config.client_config())
    return _static_loader(config, "wordpress-page-static-loader", "pages", client.get_all_pages)


def wordpress_media_static_loader(config: WordPressStaticLoaderConfig) -> StaticLoader:
    client = WordPressService(config.client_config())
    return _static_loader(config, "wordpress-media-static-loader", "media", client.get_all_media)


def wordpress_category_static_loader(config: WordPressStaticLoaderConfig) -> StaticLoader:
    client = WordPressService(config.client_config())
    return _static_loader(config, "wordpress-category-static-loader", "categories", client.get_all_categories)


def wordpress_tag_static_loader(config: WordPressStaticLoaderConfig) -> StaticLoader:
    client = WordPressService(config.client_config())
    return _static_loader(config, "wordpress-tag-static-loader", "tags", client.get_all_tags)


def wordpress_user_static_loader(config: WordPressStaticLoaderConfig) -> StaticLoader:
    client = WordPressService(config.client_config())
    return _static_loader(config, "wordpress-user-static-loader", "users", client.get_all_users)


def wordpress_custom_post_static_loader(config: WordPressStaticLoaderConfig, post_type: str) -> StaticLoader:
    methods = WordPressService(config.client_config()).get_custom_post_type(post_type)
    return _static_loader(config, f"wordpress-{post_type}-static-loader", post_type, methods.get_all_items)
