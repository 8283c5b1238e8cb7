"""Tests for universal, short and fallback URL construction."""

from urllib.parse import parse_qs, parse_qsl, urlsplit

import pytest

from deeplink_router.services.url_builder import (
    build_fallback_url,
    build_short_url,
    build_universal_url,
    stringify_params,
)


def decode(url: str) -> dict[str, str]:
    return dict(parse_qsl(urlsplit(url).query, keep_blank_values=True))


class TestUniversalUrl:
    """Test build_universal_url."""

    def test_matches_documented_example(self):
        url = build_universal_url("links.test", "acmeApp", "/product/42", {"ref": "email"})
        assert url == "https://links.test/u/acmeApp?app=acmeApp&r=%2Fproduct%2F42&ref=email"

    @pytest.mark.parametrize(
        "params",
        [
            {},
            {"ref": "email", "campaign": "spring sale"},
            {"q": "a&b=c", "emoji": "ü✓", "empty": ""},
        ],
    )
    def test_round_trips_app_route_and_params(self, params):
        url = build_universal_url("links.test", "acmeApp", "/search?x=1", params)
        decoded = decode(url)
        assert decoded.pop("app") == "acmeApp"
        assert decoded.pop("r") == "/search?x=1"
        assert decoded == params

    def test_router_keys_win_over_params(self):
        url = build_universal_url("links.test", "acmeApp", "/home", {"r": "/evil", "app": "other", "x": "1"})
        query = parse_qs(urlsplit(url).query)
        assert query == {"app": ["acmeApp"], "r": ["/home"], "x": ["1"]}

    def test_is_deterministic(self):
        params = {"b": "2", "a": "1"}
        first = build_universal_url("links.test", "acmeApp", "/", params)
        assert build_universal_url("links.test", "acmeApp", "/", dict(params)) == first

    def test_app_id_is_escaped_in_path(self):
        url = build_universal_url("links.test", "my app/1", "/", {})
        assert urlsplit(url).path == "/u/my%20app%2F1"


def test_short_url():
    assert build_short_url("links.test", "Ab3_-xYz") == "https://links.test/s/Ab3_-xYz"


class TestFallbackUrl:
    """Test build_fallback_url."""

    def test_sets_route_and_params(self):
        url = build_fallback_url("https://shop.test", "/product/42", {"ref": "email"})
        assert url == "https://shop.test/?r=%2Fproduct%2F42&ref=email"

    def test_overwrites_existing_params_in_place(self):
        url = build_fallback_url(
            "https://acme.test/open?src=link&r=old&ref=a&ref=b",
            "/new",
            {"ref": "email", "extra": "1"},
        )
        assert parse_qsl(urlsplit(url).query) == [
            ("src", "link"),
            ("r", "/new"),
            ("ref", "email"),
            ("extra", "1"),
        ]

    def test_keeps_path_and_fragment(self):
        url = build_fallback_url("https://acme.test/app/open#top", "/", {})
        parts = urlsplit(url)
        assert parts.path == "/app/open"
        assert parts.fragment == "top"


class TestStringifyParams:
    """Test parameter normalization at the boundary."""

    def test_scalars_are_stringified(self):
        assert stringify_params({"s": "x", "i": 42, "f": 1.5, "whole": 2.0, "t": True, "no": False}) == {
            "s": "x",
            "i": "42",
            "f": "1.5",
            "whole": "2",
            "t": "true",
            "no": "false",
        }

    def test_empty_and_none(self):
        assert stringify_params(None) == {}
        assert stringify_params({}) == {}

    @pytest.mark.parametrize("value", [None, [1, 2], {"a": 1}, float("nan"), float("inf")])
    def test_rejects_non_scalars(self, value):
        with pytest.raises(ValueError):
            stringify_params({"bad": value})
