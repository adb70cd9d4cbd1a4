"""Tests for URL rules and the router."""

from __future__ import annotations

import pytest

from mvcstarter.core.config import WEB_URL_RULES
from mvcstarter.core.errors import RouteError
from mvcstarter.core.routing import RouteMatch, RouteRule, Router, parse_route


@pytest.fixture
def router() -> Router:
    return Router([
        RouteRule(r"product/view/<id:\d+>", "product/view"),
        RouteRule("<controller>/<action>", "<controller>/<action>"),
    ])


@pytest.fixture
def web_router() -> Router:
    return Router(WEB_URL_RULES)


class TestMatch:
    def test_numeric_placeholder_binds_id(self, router: Router) -> None:
        assert router.match("product/view/42") == RouteMatch("product", "view", {"id": "42"})

    def test_non_numeric_id_does_not_match_typed_rule(self, router: Router) -> None:
        # The generic rule has two segments, so nothing matches.
        assert router.match("product/view/abc") is None

    def test_non_numeric_id_without_generic_rule(self) -> None:
        router = Router([RouteRule(r"product/view/<id:\d+>", "product/view")], default_route="")
        assert router.match("product/view/abc") is None

    def test_generic_rule_catches_unknown_controller(self, router: Router) -> None:
        result = router.match("unknownctrl/foo")
        assert result == RouteMatch("unknownctrl", "foo", {})
        assert result.route == "unknownctrl/foo"

    def test_generic_rule_matches_path_without_id(self, router: Router) -> None:
        assert router.match("product/view") == RouteMatch("product", "view", {})

    def test_first_matching_rule_wins(self) -> None:
        router = Router([
            RouteRule("about", "site/about"),
            RouteRule("about", "page/about"),
        ])
        assert router.match("about").route == "site/about"

    def test_rule_order_matters(self) -> None:
        router = Router([
            RouteRule("<controller>/<action>", "<controller>/<action>"),
            RouteRule("product/special", "product/view"),
        ])
        assert router.match("product/special").route == "product/special"

    def test_literal_pattern_matches_only_identical_path(self) -> None:
        router = Router([RouteRule("contact", "site/contact")], default_route="")
        assert router.match("contact").route == "site/contact"
        assert router.match("contacts") is None
        assert router.match("contact/us") is None

    def test_surrounding_slashes_are_ignored(self, router: Router) -> None:
        assert router.match("/product/view/7/") == RouteMatch("product", "view", {"id": "7"})

    def test_method_is_not_part_of_matching(self, router: Router) -> None:
        assert router.match("product/view/1", "DELETE") == router.match("product/view/1", "GET")

    def test_custom_regex_placeholder(self) -> None:
        router = Router([RouteRule("post/<slug:[a-z-]+>", "post/view")])
        assert router.match("post/hello-world").params == {"slug": "hello-world"}
        assert router.match("post/Hello") is None

    def test_route_template_placeholders_are_not_params(self) -> None:
        router = Router([RouteRule("<controller>/<id:\\d+>", "<controller>/view")])
        assert router.match("order/15") == RouteMatch("order", "view", {"id": "15"})

    def test_empty_path_uses_default_route(self, router: Router) -> None:
        assert router.match("") == RouteMatch("site", "index", {})

    def test_resolve_raises_not_found(self, router: Router) -> None:
        with pytest.raises(RouteError) as excinfo:
            router.resolve("a/b/c")
        assert excinfo.value.status_code == 404
        assert excinfo.value.name == "Not Found"


class TestWebRules:
    def test_home(self, web_router: Router) -> None:
        assert web_router.match("/").route == "site/index"

    def test_controller_only_path_uses_index(self, web_router: Router) -> None:
        assert web_router.match("product").route == "product/index"

    @pytest.mark.parametrize("action", ["view", "update", "delete"])
    def test_id_rules(self, web_router: Router, action: str) -> None:
        assert web_router.match(f"product/{action}/3") == RouteMatch("product", action, {"id": "3"})

    def test_dashed_action(self, web_router: Router) -> None:
        assert web_router.match("site/hello-world").route == "site/hello-world"

    def test_deep_path_is_not_found(self, web_router: Router) -> None:
        assert web_router.match("product/view/3/extra") is None

    @pytest.mark.parametrize("path", ["product/view/42\n", "product/view/\u0664\u0662", "product/view/\uff14\uff12"])
    def test_id_must_be_ascii_digits(self, web_router: Router, path: str) -> None:
        assert web_router.match(path) is None

    def test_literal_rule_rejects_trailing_newline(self) -> None:
        rule = RouteRule("report/daily", "report/show")
        assert rule.match("report/daily") is not None
        assert rule.match("report/daily\n") is None

    def test_non_ascii_digits_are_not_built_into_urls(self, web_router: Router) -> None:
        assert web_router.create_url("product/view", {"id": "\u0664\u0662"}) == "/product/view?id=%D9%A4%D9%A2"


class TestCreateUrl:
    def test_typed_rule(self, web_router: Router) -> None:
        assert web_router.create_url("product/view", {"id": 5}) == "/product/view/5"

    def test_generic_rule(self, web_router: Router) -> None:
        assert web_router.create_url("product/index") == "/product/index"

    def test_home(self, web_router: Router) -> None:
        assert web_router.create_url("site/index") == "/"

    def test_extra_params_become_query(self, web_router: Router) -> None:
        assert web_router.create_url("product/index", {"category_id": 2}) == "/product/index?category_id=2"

    def test_constraint_failure_falls_through(self, web_router: Router) -> None:
        assert web_router.create_url("product/view", {"id": "abc"}) == "/product/view?id=abc"

    def test_no_rules(self) -> None:
        assert Router([]).create_url("report/show", {"page": 2}) == "/report/show?page=2"

    def test_controller_only_route(self, web_router: Router) -> None:
        assert web_router.create_url("product") == "/product/index"


class TestRules:
    def test_duplicate_placeholder(self) -> None:
        with pytest.raises(ValueError):
            RouteRule("<id>/<id>", "a/b")

    def test_placeholders(self) -> None:
        assert RouteRule(r"product/view/<id:\d+>", "product/view").placeholders == ("id",)

    @pytest.mark.parametrize(
        "route, expected",
        [("help", ("help", "index")), ("route/list", ("route", "list")), ("/site/index/", ("site", "index"))],
    )
    def test_parse_route(self, route: str, expected) -> None:
        assert parse_route(route) == expected

    @pytest.mark.parametrize("route", ["", "/", "a/b/c"])
    def test_parse_route_rejects(self, route: str) -> None:
        with pytest.raises(ValueError):
            parse_route(route)
