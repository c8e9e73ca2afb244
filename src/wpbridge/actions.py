"""
WordPress Actions - Create, update and delete posts (or pages / custom post types).

Executors take an ActionConfig and a validated input; the create_*_action factories
bind credentials once and return an async callable that validates raw input first.
Writes are never retried.
"""

from collections.abc import Awaitable, Callable, Mapping
from typing import Any

import aiohttp
from pydantic import ValidationError

from wpbridge.auth import BasicAuthCredentials, create_basic_auth_header
from wpbridge.core import API_PATH
from wpbridge.errors import WordPressAPIError
from wpbridge.models import (
    CreatePostInput,
    DeletePostInput,
    DeletePostResult,
    UpdatePostInput,
    WordPressErrorBody,
    WordPressPost,
)
from wpbridge.utils.base_api_client import APIResponse, BaseAPIClient
from wpbridge.utils.get_logger import get_logger
from wpbridge.utils.pydantic_tools import BaseModelWithMethods

logger = get_logger(__name__)

DEFAULT_RESOURCE = "posts"


class ActionConfig(BaseModelWithMethods):
    """api_base is the REST root without the resource (https://example.com/wp-json/wp/v2)."""

    api_base: str
    auth_header: str
    timeout: int = 30

    @classmethod
    def from_base_url(cls, base_url: str, auth: BasicAuthCredentials, timeout: int = 30) -> "ActionConfig":
        return cls(
            api_base=f"{base_url.rstrip('/')}{API_PATH}",
            auth_header=create_basic_auth_header(auth),
            timeout=timeout,
        )


class WordPressActionsService(BaseAPIClient):
    """Authenticated write requests against one REST root."""

    def __init__(self, config: ActionConfig):
        self.config = config

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        json_body: Any = None,
    ) -> APIResponse:
        url = f"{self.config.api_base}{endpoint}"
        headers = {"Authorization": self.config.auth_header}
        if json_body is not None:
            headers["Content-Type"] = "application/json"

        try:
            response = await self._core_async_request(
                method,
                url,
                params=params,
                headers=headers,
                json_body=json_body,
                timeout=self.config.timeout,
                max_retries=1,
            )
        except TimeoutError as e:
            raise WordPressAPIError(f"WordPress request timed out: {method} {url}", status=504) from e
        except aiohttp.ClientError as e:
            raise WordPressAPIError(f"WordPress request failed: {method} {url}: {e}", status=503) from e

        if not response.ok:
            raise _api_error(response)
        return response


def _api_error(response: APIResponse) -> WordPressAPIError:
    """Prefer WordPress's own error message, fall back to the status line."""
    try:
        message = WordPressErrorBody.model_validate(response.data).message
    except ValidationError:
        message = f"WordPress API error: {response.status} {response.reason}".rstrip()
    logger.warning(f"WordPress write failed ({response.status}): {message}")
    return WordPressAPIError(message, status=response.status)


def _resource_path(resource: str | None) -> str:
    return f"/{(resource or DEFAULT_RESOURCE).strip('/')}"


async def execute_create_post(
    config: ActionConfig,
    post_input: CreatePostInput | Mapping[str, Any],
    resource: str = DEFAULT_RESOURCE,
) -> WordPressPost:
    """Create a post. Only explicitly set fields are sent; WordPress defaults the rest (status=draft).

    Raises:
        WordPressAPIError: with a status-derived code on any non-2xx response
    """
    if not isinstance(post_input, CreatePostInput):
        post_input = CreatePostInput.model_validate(post_input)

    response = await WordPressActionsService(config)._make_request(
        "POST", _resource_path(resource), json_body=post_input.to_request_body()
    )
    return WordPressPost.model_validate(response.data)


async def execute_update_post(
    config: ActionConfig,
    post_input: UpdatePostInput | Mapping[str, Any],
    resource: str = DEFAULT_RESOURCE,
) -> WordPressPost:
    """Update a post. WordPress takes updates as POST /<resource>/<id>."""
    if not isinstance(post_input, UpdatePostInput):
        post_input = UpdatePostInput.model_validate(post_input)

    response = await WordPressActionsService(config)._make_request(
        "POST",
        f"{_resource_path(resource)}/{post_input.id}",
        json_body=post_input.to_request_body(exclude={"id"}),
    )
    return WordPressPost.model_validate(response.data)


async def execute_delete_post(
    config: ActionConfig,
    post_input: DeletePostInput | Mapping[str, Any],
    resource: str = DEFAULT_RESOURCE,
) -> DeletePostResult:
    """
    Trash a post, or delete it permanently with force=True.

    WordPress answers a forced delete with {"deleted": true, "previous": {...}} and a
    trash with the trashed post itself.
    """
    if not isinstance(post_input, DeletePostInput):
        post_input = DeletePostInput.model_validate(post_input)

    params = {"force": "true"} if post_input.force else None
    response = await WordPressActionsService(config)._make_request(
        "DELETE", f"{_resource_path(resource)}/{post_input.id}", params=params
    )

    deleted = isinstance(response.data, dict) and response.data.get("deleted") is True
    return DeletePostResult(id=post_input.id, deleted=deleted)


def create_create_post_action(
    base_url: str,
    auth: BasicAuthCredentials,
    schema: type[CreatePostInput] | None = None,
    resource: str = DEFAULT_RESOURCE,
) -> Callable[[Any], Awaitable[WordPressPost]]:
    """
    Bind credentials for post creation.

    Pass a CreatePostInput subclass as `schema` to type custom fields (e.g. acf).
    """
    config = ActionConfig.from_base_url(base_url, auth)
    input_schema = schema or CreatePostInput

    async def create_post(raw_input: Any) -> WordPressPost:
        return await execute_create_post(config, input_schema.model_validate(raw_input), resource)

    return create_post


def create_update_post_action(
    base_url: str,
    auth: BasicAuthCredentials,
    schema: type[UpdatePostInput] | None = None,
    resource: str = DEFAULT_RESOURCE,
) -> Callable[[Any], Awaitable[WordPressPost]]:
    config = ActionConfig.from_base_url(base_url, auth)
    input_schema = schema or UpdatePostInput

    async def update_post(raw_input: Any) -> WordPressPost:
        return await execute_update_post(config, input_schema.model_validate(raw_input), resource)

    return update_post


def create_delete_post_action(
    base_url: str,
    auth: BasicAuthCredentials,
    resource: str = DEFAULT_RESOURCE,
) -> Callable[[Any], Awaitable[DeletePostResult]]:
    config = ActionConfig.from_base_url(base_url, auth)

    async def delete_post(raw_input: Any) -> DeletePostResult:
        return await execute_delete_post(config, DeletePostInput.model_validate(raw_input), resource)

    return delete_post
