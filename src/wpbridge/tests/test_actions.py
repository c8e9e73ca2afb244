"""
Unit tests for post actions (create/update/delete).
"""

import re
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest
from pydantic import ValidationError

from wpbridge.actions import (
    ActionConfig,
    create_create_post_action,
    create_delete_post_action,
    create_update_post_action,
    execute_create_post,
    execute_delete_post,
    execute_update_post,
)
from wpbridge.auth import create_basic_auth_header
from wpbridge.core import WordPressClientConfig, WordPressService
from wpbridge.errors import WordPressAPIError
from wpbridge.models import CreatePostInput, UpdatePostInput

pytestmark = pytest.mark.unit


def _queue(mock_http, *responses):
    mock_http.request.return_value.__aenter__.side_effect = list(responses)


def _call(mock_http, call_index=0):
    return mock_http.request.call_args_list[call_index]


@pytest.fixture
def action_config(base_url, basic_credentials):
    return ActionConfig.from_base_url(base_url, basic_credentials)


class TestActionConfig:
    def test_from_base_url(self, basic_credentials):
        """Test the REST base and Authorization header are derived from the site URL."""
        config = ActionConfig.from_base_url("https://example.com/", basic_credentials)

        assert config.api_base == "https://example.com/wp-json/wp/v2"
        assert config.auth_header == create_basic_auth_header(basic_credentials)
        assert config.timeout == 30


class TestExecuteCreatePost:
    """Tests for execute_create_post."""

    @pytest.mark.asyncio
    async def test_posts_only_set_fields(self, action_config, mock_http, response_factory, posts_data):
        """Test only explicitly set fields are sent on create."""
        _queue(mock_http, response_factory(posts_data[0], status=201, reason="Created"))

        post = await execute_create_post(action_config, CreatePostInput(title="Hello World", status="publish"))

        call = _call(mock_http)
        assert call.args == ("POST", "https://example.com/wp-json/wp/v2/posts")
        assert call.kwargs["json"] == {"title": "Hello World", "status": "publish"}
        assert call.kwargs["headers"]["Authorization"].startswith("Basic ")
        assert call.kwargs["headers"]["Content-Type"] == "application/json"
        assert post.id == 101

    @pytest.mark.asyncio
    async def test_returned_post_reflects_set_fields(self, action_config, mock_http, response_factory):
        """Test the created post is parsed from the response body."""
        created = {
            "id": 300,
            "title": {"rendered": "Draft title"},
            "content": {"rendered": "<p>Body</p>\n", "protected": False},
            "status": "draft",
            "categories": [1, 3],
        }
        _queue(mock_http, response_factory(created, status=201, reason="Created"))

        post = await execute_create_post(
            action_config, {"title": "Draft title", "content": "Body", "categories": [1, 3]}
        )

        assert post.title.rendered == "Draft title"
        assert post.status == "draft"
        assert post.categories == [1, 3]

    @pytest.mark.asyncio
    async def test_custom_resource(self, action_config, mock_http, response_factory, pages_data):
        """Test the resource name selects the endpoint."""
        _queue(mock_http, response_factory(pages_data[0], status=201, reason="Created"))

        await execute_create_post(action_config, CreatePostInput(title="About"), resource="pages")

        assert _call(mock_http).args[1].endswith("/wp-json/wp/v2/pages")

    @pytest.mark.asyncio
    async def test_wordpress_error_message(self, action_config, mock_http, response_factory, wp_error_data):
        """Test WordPress error bodies become WordPressAPIError messages."""
        _queue(mock_http, response_factory(wp_error_data, status=401, reason="Unauthorized"))

        with pytest.raises(WordPressAPIError) as exc_info:
            await execute_create_post(action_config, CreatePostInput(title="x"))

        assert exc_info.value.message == "Sorry, you are not allowed to create posts as this user."
        assert exc_info.value.status == 401
        assert exc_info.value.code == "UNAUTHORIZED"

    @pytest.mark.asyncio
    async def test_non_json_error_falls_back_to_status_line(self, action_config, mock_http, response_factory):
        """Test a non-JSON error body falls back to the status line."""
        _queue(mock_http, response_factory(None, status=502, reason="Bad Gateway", text="<html>"))

        with pytest.raises(WordPressAPIError) as exc_info:
            await execute_create_post(action_config, CreatePostInput(title="x"))

        assert exc_info.value.message == "WordPress API error: 502 Bad Gateway"
        assert exc_info.value.code == "BAD_GATEWAY"
        assert mock_http.request.call_count == 1

    @pytest.mark.asyncio
    async def test_network_error(self, action_config, mock_http):
        """Test network failures map to a 503 WordPressAPIError."""
        mock_http.request.return_value.__aenter__.side_effect = aiohttp.ClientConnectionError("reset")

        with pytest.raises(WordPressAPIError) as exc_info:
            await execute_create_post(action_config, CreatePostInput(title="x"))

        assert exc_info.value.status == 503


class TestExecuteUpdatePost:
    @pytest.mark.asyncio
    async def test_posts_to_item_url_without_id(self, action_config, mock_http, response_factory, posts_data):
        """Test update posts to the item URL and leaves id out of the body."""
        _queue(mock_http, response_factory(posts_data[0]))

        await execute_update_post(action_config, UpdatePostInput(id=101, title="Renamed", sticky=True))

        call = _call(mock_http)
        assert call.args == ("POST", "https://example.com/wp-json/wp/v2/posts/101")
        assert call.kwargs["json"] == {"title": "Renamed", "sticky": True}

    @pytest.mark.asyncio
    async def test_acf_passes_through(self, action_config, mock_http, response_factory, posts_data):
        """Test unknown fields such as acf pass through to the body."""
        _queue(mock_http, response_factory(posts_data[0]))

        await execute_update_post(action_config, {"id": 101, "acf": {"subtitle": "New"}})

        assert _call(mock_http).kwargs["json"] == {"acf": {"subtitle": "New"}}


class TestExecuteDeletePost:
    @pytest.mark.asyncio
    async def test_trash(self, action_config, mock_http, response_factory, posts_data):
        """Test delete without force trashes the post and sends no body."""
        _queue(mock_http, response_factory(dict(posts_data[0], status="trash")))

        result = await execute_delete_post(action_config, {"id": 101})

        call = _call(mock_http)
        assert call.args == ("DELETE", "https://example.com/wp-json/wp/v2/posts/101")
        assert call.kwargs["params"] is None
        assert call.kwargs["json"] is None
        assert "Content-Type" not in call.kwargs["headers"]
        assert result.id == 101
        assert result.deleted is False

    @pytest.mark.asyncio
    async def test_force(self, action_config, mock_http, response_factory, posts_data):
        """Test force=true is sent as a query parameter."""
        _queue(mock_http, response_factory({"deleted": True, "previous": posts_data[0]}))

        result = await execute_delete_post(action_config, {"id": 101, "force": True})

        assert _call(mock_http).kwargs["params"] == {"force": "true"}
        assert result.deleted is True

    @pytest.mark.asyncio
    async def test_not_found(self, action_config, mock_http, response_factory):
        """Test deleting a missing post raises NOT_FOUND."""
        body = {"code": "rest_post_invalid_id", "message": "Invalid post ID.", "data": {"status": 404}}
        _queue(mock_http, response_factory(body, status=404, reason="Not Found"))

        with pytest.raises(WordPressAPIError) as exc_info:
            await execute_delete_post(action_config, {"id": 999, "force": True})

        assert exc_info.value.code == "NOT_FOUND"
        assert exc_info.value.message == "Invalid post ID."


class TestActionFactories:
    """Tests for the create_*_action factories."""

    @pytest.mark.asyncio
    async def test_create_action_validates_input(self, base_url, basic_credentials, mock_http):
        """Test the create action validates before any request."""
        create_post = create_create_post_action(base_url, basic_credentials)

        with pytest.raises(ValidationError):
            await create_post({"status": "not-a-status"})

        mock_http.request.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_action_with_schema(
        self, base_url, basic_credentials, mock_http, response_factory, posts_data
    ):
        """Test a custom schema's extra fields are sent."""
        class BookInput(CreatePostInput):
            isbn: str

        _queue(mock_http, response_factory(posts_data[0], status=201, reason="Created"))
        create_book = create_create_post_action(base_url, basic_credentials, schema=BookInput, resource="books")

        await create_book({"title": "Dune", "isbn": "978-0441013593"})

        call = _call(mock_http)
        assert call.args[1].endswith("/books")
        assert call.kwargs["json"] == {"title": "Dune", "isbn": "978-0441013593"}

    @pytest.mark.asyncio
    async def test_create_action_schema_rejects(self, base_url, basic_credentials, mock_http):
        class BookInput(CreatePostInput):
            isbn: str

        create_book = create_create_post_action(base_url, basic_credentials, schema=BookInput)

        with pytest.raises(ValidationError):
            await create_book({"title": "Dune"})

    @pytest.mark.asyncio
    async def test_update_action(self, base_url, basic_credentials, mock_http, response_factory, posts_data):
        """Test the update action returns the parsed post."""
        _queue(mock_http, response_factory(posts_data[1]))

        post = await create_update_post_action(base_url, basic_credentials)({"id": 102, "format": "aside"})

        assert post.format == "aside"
        assert _call(mock_http).args[1].endswith("/posts/102")

    @pytest.mark.asyncio
    async def test_update_action_requires_id(self, base_url, basic_credentials):
        """Test update without id fails validation."""
        with pytest.raises(ValidationError):
            await create_update_post_action(base_url, basic_credentials)({"title": "x"})

    @pytest.mark.asyncio
    async def test_delete_action(self, base_url, basic_credentials, mock_http, response_factory, posts_data):
        """Test the delete action targets the configured resource."""
        _queue(mock_http, response_factory({"deleted": True, "previous": posts_data[0]}))

        result = await create_delete_post_action(base_url, basic_credentials, resource="pages")(
            {"id": 7, "force": True}
        )

        assert result.deleted is True
        assert _call(mock_http).args[1].endswith("/pages/7")


class InMemoryPostsEndpoint:
    """Serves /posts from a dict: POST stores the body, GET /posts/<id> renders it back."""

    ITEM_URL = re.compile(r"/wp-json/wp/v2/posts/(\d+)$")

    def __init__(self, response_factory):
        self.response_factory = response_factory
        self.posts: dict[int, dict] = {}
        self.next_id = 500

    def __call__(self, method, url, **kwargs):
        context = MagicMock()
        context.__aenter__ = AsyncMock(return_value=self._respond(method, url, kwargs.get("json")))
        context.__aexit__ = AsyncMock(return_value=False)
        return context

    def _respond(self, method, url, body):
        if method == "POST" and url.endswith("/wp-json/wp/v2/posts"):
            post = {
                "id": self.next_id,
                "title": {"rendered": body["title"]},
                "content": {"rendered": f"<p>{body.get('content', '')}</p>\n", "protected": False},
                "status": body.get("status", "draft"),
                "categories": body.get("categories", [1]),
            }
            self.posts[post["id"]] = post
            self.next_id += 1
            return self.response_factory(post, status=201, reason="Created")

        match = self.ITEM_URL.search(url)
        if method == "GET" and match and int(match.group(1)) in self.posts:
            return self.response_factory(self.posts[int(match.group(1))])

        body = {"code": "rest_post_invalid_id", "message": "Invalid post ID.", "data": {"status": 404}}
        return self.response_factory(body, status=404, reason="Not Found")


class TestCreateThenRead:
    """Tests for reading a created post back by id."""

    @pytest.mark.asyncio
    async def test_created_fields_survive_read_back(
        self, action_config, base_url, basic_credentials, mock_http, response_factory
    ):
        """Test title, content, status and categories match between create and get_post."""
        endpoint = InMemoryPostsEndpoint(response_factory)
        mock_http.request.side_effect = endpoint
        service = WordPressService(WordPressClientConfig(base_url=base_url, auth=basic_credentials))

        created = await execute_create_post(
            action_config,
            {"title": "Round trip", "content": "Body text", "status": "private", "categories": [2, 7]},
        )
        fetched = await service.get_post(created.id)

        assert fetched is not None
        assert fetched.id == created.id
        assert fetched.title.rendered == created.title.rendered == "Round trip"
        assert fetched.content.rendered == created.content.rendered == "<p>Body text</p>\n"
        assert fetched.status == created.status == "private"
        assert fetched.categories == created.categories == [2, 7]

        read_call = _call(mock_http, 1)
        assert read_call.args == ("GET", f"https://example.com/wp-json/wp/v2/posts/{created.id}")
        assert read_call.kwargs["params"] == {"_embed": "true"}

    @pytest.mark.asyncio
    async def test_defaults_are_read_back(
        self, action_config, base_url, basic_credentials, mock_http, response_factory
    ):
        """Test fields left unset on create come back with WordPress defaults."""
        mock_http.request.side_effect = InMemoryPostsEndpoint(response_factory)
        service = WordPressService(WordPressClientConfig(base_url=base_url, auth=basic_credentials))

        created = await execute_create_post(action_config, CreatePostInput(title="Only a title"))
        fetched = await service.get_post(created.id)

        assert _call(mock_http, 0).kwargs["json"] == {"title": "Only a title"}
        assert fetched.status == "draft"
        assert fetched.categories == [1]

    @pytest.mark.asyncio
    async def test_unknown_id_reads_as_none(self, base_url, basic_credentials, mock_http, response_factory):
        mock_http.request.side_effect = InMemoryPostsEndpoint(response_factory)
        service = WordPressService(WordPressClientConfig(base_url=base_url, auth=basic_credentials))

        assert await service.get_post(12345) is None
