"""
wpbridge - WordPress REST API integration package.

This package provides:
- WordPressService: async REST client with auto-pagination
- Loaders: static (build-time) and live (runtime) collection adapters
- Actions: create/update/delete executors for posts, pages and custom post types
- WordPressAuthBridge: wp-login.php form login backed by local sessions
- Handlers: FastAPI router for login/logout/current user
"""

from wpbridge.actions import (
    ActionConfig,
    create_create_post_action,
    create_delete_post_action,
    create_update_post_action,
    execute_create_post,
    execute_delete_post,
    execute_update_post,
)
from wpbridge.adapters.session_store import (
    InMemorySessionStore,
    RedisSessionStore,
    SessionStore,
    create_session_store,
)
from wpbridge.auth import (
    BasicAuthCredentials,
    CookieCredentials,
    WordPressAuth,
    create_basic_auth_header,
    wordpress_auth,
)
from wpbridge.core import (
    CustomPostTypeMethods,
    WordPressClient,
    WordPressClientConfig,
    WordPressService,
)
from wpbridge.errors import AuthenticationError, WordPressAPIError
from wpbridge.filters import (
    CategoriesFilter,
    CustomPostFilter,
    MediaFilter,
    PagesFilter,
    PaginationParams,
    PostsFilter,
    TagsFilter,
    UsersFilter,
    camel_to_snake,
    filter_to_params,
)
from wpbridge.handlers import create_auth_router, get_session_dependency
from wpbridge.loaders import (
    CategoryFilter,
    LiveLoader,
    MediaEntryFilter,
    PageFilter,
    PostFilter,
    StaticLoader,
    UserFilter,
    WordPressLoaderConfig,
    WordPressStaticLoaderConfig,
    wordpress_category_loader,
    wordpress_category_static_loader,
    wordpress_custom_post_loader,
    wordpress_custom_post_static_loader,
    wordpress_media_loader,
    wordpress_media_static_loader,
    wordpress_page_loader,
    wordpress_page_static_loader,
    wordpress_post_loader,
    wordpress_post_static_loader,
    wordpress_tag_static_loader,
    wordpress_user_loader,
    wordpress_user_static_loader,
)
from wpbridge.models import (
    CollectionResult,
    CreatePostInput,
    DeletePostInput,
    DeletePostResult,
    EntryResult,
    PaginatedResponse,
    UpdatePostInput,
    WordPressAuthor,
    WordPressCategory,
    WordPressMedia,
    WordPressPage,
    WordPressPost,
    WordPressSettings,
    WordPressTag,
)
from wpbridge.session import (
    AuthBridgeConfig,
    LoginInput,
    LoginResult,
    WordPressAuthBridge,
    WordPressAuthSession,
    sanitize_redirect_path,
)

__all__ = [
    # Auth
    "BasicAuthCredentials",
    "CookieCredentials",
    "WordPressAuth",
    "create_basic_auth_header",
    "wordpress_auth",
    # Errors
    "WordPressAPIError",
    "AuthenticationError",
    # Filters
    "PaginationParams",
    "PostsFilter",
    "CustomPostFilter",
    "PagesFilter",
    "MediaFilter",
    "CategoriesFilter",
    "TagsFilter",
    "UsersFilter",
    "camel_to_snake",
    "filter_to_params",
    # Core
    "WordPressService",
    "WordPressClient",
    "WordPressClientConfig",
    "CustomPostTypeMethods",
    # Models
    "WordPressPost",
    "WordPressPage",
    "WordPressMedia",
    "WordPressCategory",
    "WordPressTag",
    "WordPressAuthor",
    "WordPressSettings",
    "CreatePostInput",
    "UpdatePostInput",
    "DeletePostInput",
    "DeletePostResult",
    "PaginatedResponse",
    "CollectionResult",
    "EntryResult",
    # Loaders
    "WordPressLoaderConfig",
    "WordPressStaticLoaderConfig",
    "StaticLoader",
    "LiveLoader",
    "PostFilter",
    "PageFilter",
    "MediaEntryFilter",
    "CategoryFilter",
    "UserFilter",
    "wordpress_post_loader",
    "wordpress_page_loader",
    "wordpress_media_loader",
    "wordpress_category_loader",
    "wordpress_user_loader",
    "wordpress_custom_post_loader",
    "wordpress_post_static_loader",
    "wordpress_page_static_loader",
    "wordpress_media_static_loader",
    "wordpress_category_static_loader",
    "wordpress_tag_static_loader",
    "wordpress_user_static_loader",
    "wordpress_custom_post_static_loader",
    # Actions
    "ActionConfig",
    "execute_create_post",
    "execute_update_post",
    "execute_delete_post",
    "create_create_post_action",
    "create_update_post_action",
    "create_delete_post_action",
    # Sessions
    "SessionStore",
    "InMemorySessionStore",
    "RedisSessionStore",
    "create_session_store",
    "AuthBridgeConfig",
    "LoginInput",
    "LoginResult",
    "WordPressAuthBridge",
    "WordPressAuthSession",
    "sanitize_redirect_path",
    # Handlers
    "create_auth_router",
    "get_session_dependency",
]
