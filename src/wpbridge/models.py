"""
WordPress Models - Pydantic models for WordPress REST API resources.
Follows Pydantic 2.0 patterns. Fields WordPress always sends are typed explicitly;
anything else (ACF blocks, plugin fields) is preserved in `model_extra`.
"""

from typing import Any, Generic, Literal, TypeVar

from pydantic import ConfigDict, Field, PositiveInt

from wpbridge.utils.pydantic_tools import BaseModelWithMethods

T = TypeVar("T")


class WordPressModel(BaseModelWithMethods):
    """Base for upstream records. Unknown keys are kept, `_links`/`_embedded` map to aliases."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    def to_api_dict(self) -> dict[str, Any]:
        """Dump back to the upstream JSON shape (underscore keys, extras included)."""
        return self.model_dump(by_alias=True, mode="json")


class Rendered(WordPressModel):
    rendered: str = ""


class RenderedContent(Rendered):
    protected: bool = False


# ============================================================================
# Content types
# ============================================================================


class WordPressBase(WordPressModel):
    """Fields shared by posts, pages, media and custom post types."""

    id: int
    date: str | None = None
    date_gmt: str | None = None
    guid: Rendered | None = None
    modified: str | None = None
    modified_gmt: str | None = None
    slug: str = ""
    status: str | None = None
    type: str | None = None
    link: str | None = None
    title: Rendered = Field(default_factory=Rendered)
    author: int | None = None
    meta: dict[str, Any] | list[Any] | None = None
    links: Any = Field(default=None, alias="_links")


class WordPressContent(WordPressBase):
    """Posts, pages and custom post types with content fields."""

    content: RenderedContent = Field(default_factory=RenderedContent)
    excerpt: RenderedContent = Field(default_factory=RenderedContent)
    featured_media: int | None = None
    comment_status: str | None = None
    ping_status: str | None = None
    template: str | None = None
    acf: dict[str, Any] | list[Any] | None = None
    embedded: dict[str, Any] | None = Field(default=None, alias="_embedded")


class WordPressPost(WordPressContent):
    sticky: bool = False
    format: str = "standard"
    categories: list[int] = Field(default_factory=list)
    tags: list[int] = Field(default_factory=list)


class WordPressPage(WordPressContent):
    parent: int = 0
    menu_order: int = 0
    class_list: list[str] = Field(default_factory=list)


# ============================================================================
# Media
# ============================================================================


class MediaSize(WordPressModel):
    file: str
    width: int
    height: int
    filesize: int | None = None
    mime_type: str | None = None
    source_url: str


class MediaDetails(WordPressModel):
    width: int | None = None
    height: int | None = None
    file: str | None = None
    filesize: int | None = None
    sizes: dict[str, MediaSize] = Field(default_factory=dict)
    image_meta: Any = None


class WordPressMedia(WordPressBase):
    comment_status: str | None = None
    ping_status: str | None = None
    alt_text: str = ""
    caption: Rendered = Field(default_factory=Rendered)
    description: Rendered = Field(default_factory=Rendered)
    media_type: str | None = None
    mime_type: str | None = None
    media_details: MediaDetails = Field(default_factory=MediaDetails)
    source_url: str = ""


class WordPressEmbeddedMedia(WordPressModel):
    """Featured media as it appears inside `_embedded["wp:featuredmedia"]`."""

    id: int
    date: str | None = None
    slug: str = ""
    type: str | None = None
    link: str | None = None
    title: Rendered = Field(default_factory=Rendered)
    author: int | None = None
    featured_media: int | None = None
    caption: Rendered = Field(default_factory=Rendered)
    alt_text: str = ""
    media_type: str | None = None
    mime_type: str | None = None
    media_details: MediaDetails = Field(default_factory=MediaDetails)
    source_url: str = ""
    acf: Any = None
    links: Any = Field(default=None, alias="_links")


# ============================================================================
# Taxonomies, users, settings
# ============================================================================


class WordPressCategory(WordPressModel):
    """Category or tag term."""

    id: int
    count: int = 0
    description: str = ""
    link: str | None = None
    name: str
    slug: str = ""
    taxonomy: str = "category"
    parent: int = 0
    meta: dict[str, Any] | list[Any] | None = None
    acf: dict[str, Any] | list[Any] | None = None
    embedded: Any = Field(default=None, alias="_embedded")
    links: Any = Field(default=None, alias="_links")


WordPressTag = WordPressCategory


class WordPressAuthor(WordPressModel):
    id: int
    name: str
    url: str = ""
    description: str = ""
    link: str | None = None
    slug: str = ""
    avatar_urls: dict[str, str] = Field(default_factory=dict)
    meta: dict[str, Any] | list[Any] | None = None
    links: Any = Field(default=None, alias="_links")


class WordPressSettings(WordPressModel):
    """Site settings from /settings (requires authentication)."""

    title: str
    description: str = ""
    url: str
    email: str | None = None
    timezone: str | None = None
    date_format: str | None = None
    time_format: str | None = None
    start_of_week: int | None = None
    language: str | None = None
    use_smilies: bool | None = None
    default_category: int | None = None
    default_post_format: str | None = None
    posts_per_page: int | None = None
    show_on_front: str | None = None
    page_on_front: int | None = None
    page_for_posts: int | None = None
    default_ping_status: str | None = None
    default_comment_status: str | None = None
    site_logo: int | None = None
    site_icon: int | None = None


class WordPressErrorBody(WordPressModel):
    """Error body WordPress returns with non-2xx responses."""

    code: str
    message: str
    data: Any = None


# ============================================================================
# Write inputs
# ============================================================================


class PostWriteBase(BaseModelWithMethods):
    """
    Writable post fields, as raw values rather than rendered objects.
    Every field is optional; only explicitly set fields are sent upstream.
    Subclass to type custom fields (e.g. an `acf` model); undeclared keys pass through.
    """

    model_config = ConfigDict(extra="allow")

    date: str | None = None
    date_gmt: str | None = None
    slug: str | None = None
    status: Literal["publish", "draft", "pending", "private", "future"] | None = None
    title: str | None = None
    content: str | None = None
    excerpt: str | None = None
    author: int | None = None
    featured_media: int | None = None
    comment_status: Literal["open", "closed"] | None = None
    ping_status: Literal["open", "closed"] | None = None
    format: (
        Literal["standard", "aside", "chat", "gallery", "link", "image", "quote", "status", "video", "audio"]
        | None
    ) = None
    meta: dict[str, Any] | None = None
    sticky: bool | None = None
    template: str | None = None
    categories: list[int] | None = None
    tags: list[int] | None = None
    parent: int | None = None
    menu_order: int | None = None

    def to_request_body(self, exclude: set[str] | None = None) -> dict[str, Any]:
        """JSON body with unset and None fields dropped."""
        return self.compact_dict(exclude=exclude, mode="json")


class CreatePostInput(PostWriteBase):
    pass


class UpdatePostInput(PostWriteBase):
    id: PositiveInt


class DeletePostInput(BaseModelWithMethods):
    """When `force` is true the post is permanently deleted; otherwise it is trashed."""

    model_config = ConfigDict(extra="forbid")

    id: PositiveInt
    force: bool | None = None


class DeletePostResult(BaseModelWithMethods):
    id: int
    deleted: bool


# ============================================================================
# Pagination wrappers
# ============================================================================


class FetchResult(BaseModelWithMethods, Generic[T]):
    """Decoded body plus the X-WP-Total / X-WP-TotalPages headers."""

    data: T
    total: int = 0
    total_pages: int = 0


class PaginatedResponse(BaseModelWithMethods, Generic[T]):
    data: list[T] = Field(default_factory=list)
    total: int = 0
    total_pages: int = 0
    page: int = 1
    per_page: int = 100


# ============================================================================
# Loader envelopes
# ============================================================================


class LiveEntry(BaseModelWithMethods):
    id: str
    data: dict[str, Any]
    rendered: dict[str, str] | None = None


class CollectionResult(BaseModelWithMethods):
    """Result of LiveLoader.load_collection. On failure `error` is set and entries is empty."""

    entries: list[LiveEntry] = Field(default_factory=list)
    error: str | None = None
    status_code: int = 200


class EntryResult(BaseModelWithMethods):
    """Result of LiveLoader.load_entry. On failure `error` is set and id/data are None."""

    id: str | None = None
    data: dict[str, Any] | None = None
    rendered: dict[str, str] | None = None
    error: str | None = None
    status_code: int = 200
