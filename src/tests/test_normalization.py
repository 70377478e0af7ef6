"""Tests for endpoint key normalization."""
import pytest

from schema_sentinel.utils.normalization import EndpointNormalizer, normalize_segment


@pytest.fixture
def normalizer():
    return EndpointNormalizer()


class TestEndpointNormalizer:

    def test_numeric_ids_collapse_to_the_same_key(self, normalizer):
        assert normalizer.normalize("GET", "/orders/12345") == "GET /orders/{id}"
        assert normalizer.normalize("GET", "/orders/67890") == "GET /orders/{id}"

    def test_scheme_and_host_are_dropped(self, normalizer):
        assert normalizer.normalize("GET", "https://shop.example.com/orders/12345") == "GET /orders/{id}"

    def test_uuid(self, normalizer):
        key = normalizer.normalize("GET", "/products/123e4567-e89b-12d3-a456-426614174000")
        assert key == "GET /products/{uuid}"

    def test_hash(self, normalizer):
        assert normalizer.normalize("GET", "/files/a1b2c3d4e5f6") == "GET /files/{hash}"

    def test_short_hex_words_are_kept(self, normalizer):
        assert normalizer.normalize("GET", "/feed/cafe") == "GET /feed/cafe"

    def test_query_is_stripped_by_default(self, normalizer):
        assert normalizer.normalize("GET", "/products.json?limit=250&page=2") == "GET /products.json"

    def test_query_can_be_kept(self, normalizer):
        key = normalizer.normalize("GET", "/search?q=1", strip_query=False)
        assert key == "GET /search?q=1"

    def test_method_is_uppercased(self, normalizer):
        assert normalizer.normalize("post", "/orders") == "POST /orders"

    def test_empty_path(self, normalizer):
        assert normalizer.normalize("GET", "https://api.example.com") == "GET /"

    def test_nested_ids(self, normalizer):
        key = normalizer.normalize("GET", "/users/42/orders/7/lines")
        assert key == "GET /users/{id}/orders/{id}/lines"

    def test_custom_patterns_run_first(self, normalizer):
        normalizer.add_pattern(r"/shop/[a-z0-9-]+\.myshopify\.com", "/shop/{shop}")
        key = normalizer.normalize("GET", "https://host/shop/my-store.myshopify.com/products")
        assert key == "GET /shop/{shop}/products"

    def test_add_pattern_is_chainable(self, normalizer):
        assert normalizer.add_pattern(r"v\d+", "{version}") is normalizer
        assert normalizer.normalize("GET", "/api/v2/users") == "GET /api/{version}/users"


class TestNormalizeSegment:

    @pytest.mark.parametrize("segment, expected", [
        ("", ""),
        ("users", "users"),
        ("123", "{id}"),
        ("12345678", "{id}"),
        ("deadbeef", "{hash}"),
        ("550e8400-e29b-41d4-a716-446655440000", "{uuid}"),
    ])
    def test_segments(self, segment, expected):
        assert normalize_segment(segment) == expected
