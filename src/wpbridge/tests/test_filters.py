"""
Unit tests for query-parameter translation.
"""

import pytest
from pydantic import ValidationError

from wpbridge.filters import (
    CategoriesFilter,
    CustomPostFilter,
    PostsFilter,
    UsersFilter,
    camel_to_snake,
    filter_to_params,
)

pytestmark = pytest.mark.unit


class TestCamelToSnake:
    @pytest.mark.parametrize(
        "key, expected",
        [
            ("perPage", "per_page"),
            ("hideEmpty", "hide_empty"),
            ("categoriesExclude", "categories_exclude"),
            ("per_page", "per_page"),
            ("status", "status"),
            ("_embed", "_embed"),
        ],
    )
    def test_conversion(self, key, expected):
        """Test camelCase keys convert to snake_case."""
        assert camel_to_snake(key) == expected


class TestFilterToParams:
    def test_mapping_with_camel_case_keys(self):
        """Test camelCase mapping keys, booleans and lists are translated."""
        params = filter_to_params({"perPage": 20, "hideEmpty": True, "authorExclude": [3, 4]})

        assert params == {"per_page": "20", "hide_empty": "true", "author_exclude": "3,4"}

    def test_none_values_are_omitted(self):
        """Test None values never reach the query string."""
        params = filter_to_params({"status": None, "search": "wordpress", "page": None})

        assert "status" not in params
        assert "page" not in params
        assert params["search"] == "wordpress"

    def test_per_page_defaults_to_100(self):
        """Test per_page falls back to 100."""
        assert filter_to_params({}) == {"per_page": "100"}
        assert filter_to_params(None) == {"per_page": "100"}

    def test_false_is_kept(self):
        """Test False is sent as "false" rather than dropped."""
        assert filter_to_params({"sticky": False})["sticky"] == "false"

    def test_order_independent(self):
        """Test key order does not change the result."""
        a = filter_to_params({"status": "publish", "categories": [1, 2], "perPage": 5})
        b = filter_to_params({"perPage": 5, "categories": [1, 2], "status": "publish"})

        assert a == b

    def test_pure(self):
        """Test the input mapping is left untouched."""
        source = {"perPage": 10, "tags": [1]}
        filter_to_params(source)

        assert source == {"perPage": 10, "tags": [1]}

    def test_model_input(self):
        """Test filter models are accepted directly."""
        params = filter_to_params(PostsFilter(categories=[1, 2], order="asc", per_page=10))

        assert params == {"categories": "1,2", "order": "asc", "per_page": "10"}


class TestFilterModels:
    def test_accepts_camel_case_aliases(self):
        """Test filters accept camelCase aliases."""
        posts_filter = PostsFilter.model_validate({"perPage": 50, "categoriesExclude": [9]})

        assert posts_filter.per_page == 50
        assert posts_filter.categories_exclude == [9]

    def test_accepts_snake_case(self):
        categories_filter = CategoriesFilter(hide_empty=True, parent=0)

        assert filter_to_params(categories_filter) == {
            "hide_empty": "true",
            "parent": "0",
            "per_page": "100",
        }

    def test_rejects_unknown_keys(self):
        """Test typos in filter keys fail validation."""
        with pytest.raises(ValidationError):
            PostsFilter.model_validate({"statuss": "publish"})

    def test_rejects_bad_literal(self):
        with pytest.raises(ValidationError):
            UsersFilter.model_validate({"order": "sideways"})

    def test_per_page_upper_bound(self):
        """Test per_page is capped at 100."""
        with pytest.raises(ValidationError):
            PostsFilter(per_page=101)

    def test_custom_post_filter_forwards_custom_taxonomies(self):
        custom = CustomPostFilter.model_validate({"genre": [4, 5], "status": "publish"})

        assert filter_to_params(custom) == {"genre": "4,5", "status": "publish", "per_page": "100"}

    def test_compact_dict_drops_unset_and_excluded(self):
        """Test compact_dict keeps set fields, including False."""
        posts_filter = PostsFilter(search="hello", page=2, per_page=10, sticky=False)

        assert posts_filter.compact_dict(exclude={"page", "per_page"}) == {"search": "hello", "sticky": False}
