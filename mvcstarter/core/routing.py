"""URL rules and the router that evaluates them.

A rule pattern is a slash separated path in which ``<name>`` or
``<name:regex>`` placeholders capture a segment. The route side of a rule is
either a literal ``controller/action`` or a template referencing the
pattern's placeholders, e.g. ``<controller>/<action>``.

Rules are evaluated in declaration order and the first match wins, so more
specific rules must come before the generic ones.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Tuple
from urllib.parse import urlencode

from .errors import RouteError


logger = logging.getLogger(__name__)

DEFAULT_ACTION = "index"
PLACEHOLDER = re.compile(r"<(?P<name>\w+)(?::(?P<regex>[^>]+))?>")
DEFAULT_SEGMENT = r"[^/]+"


@dataclass(frozen=True)
class RouteMatch:
    controller: str
    action: str
    params: Mapping[str, str] = field(default_factory=dict)

    @property
    def route(self) -> str:
        return f"{self.controller}/{self.action}"


def parse_route(route: str) -> Tuple[str, str]:
    """Split ``controller/action`` into its parts, defaulting the action."""
    parts = [part for part in route.strip("/").split("/") if part]
    if not parts:
        raise ValueError("Empty route")
    if len(parts) > 2:
        raise ValueError(f"Route has too many segments: {route}")
    controller = parts[0]
    action = parts[1] if len(parts) == 2 else DEFAULT_ACTION
    return controller, action


@dataclass(frozen=True)
class RouteRule:
    pattern: str
    route: str
    _regex: re.Pattern = field(init=False, repr=False, compare=False)
    _placeholders: Dict[str, re.Pattern] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        pattern = self.pattern.strip("/")
        regex_parts: List[str] = []
        placeholders: Dict[str, re.Pattern] = {}
        position = 0
        for found in PLACEHOLDER.finditer(pattern):
            regex_parts.append(re.escape(pattern[position:found.start()]))
            name = found.group("name")
            if name in placeholders:
                raise ValueError(f"Duplicate placeholder <{name}> in rule {self.pattern!r}")
            segment = found.group("regex") or DEFAULT_SEGMENT
            placeholders[name] = re.compile(segment, re.ASCII)
            regex_parts.append(f"(?P<{name}>{segment})")
            position = found.end()
        regex_parts.append(re.escape(pattern[position:]))

        object.__setattr__(self, "_regex", re.compile("".join(regex_parts), re.ASCII))
        object.__setattr__(self, "_placeholders", placeholders)

    @property
    def placeholders(self) -> Tuple[str, ...]:
        return tuple(self._placeholders)

    def match(self, path: str) -> Optional[RouteMatch]:
        found = self._regex.fullmatch(path)
        if found is None:
            return None

        params = dict(found.groupdict())
        route = self.route
        for name in self._placeholders:
            token = f"<{name}>"
            if token in route:
                route = route.replace(token, params.pop(name))

        try:
            controller, action = parse_route(route)
        except ValueError:
            return None
        return RouteMatch(controller=controller, action=action, params=params)

    def build(self, route: str, params: Mapping[str, str]) -> Optional[Tuple[str, Dict[str, str]]]:
        """Return the path for ``route`` and the params left over, or None."""
        target = self.route
        remaining = dict(params)
        template_values: Dict[str, str] = {}

        # Placeholders used in the route template are recovered from the route itself.
        template_names = [name for name in self._placeholders if f"<{name}>" in target]
        if template_names:
            regex = re.escape(target)
            for name in template_names:
                regex = regex.replace(re.escape(f"<{name}>"), f"(?P<{name}>{self._placeholders[name].pattern})", 1)
            found = re.fullmatch(regex, route, re.ASCII)
            if found is None:
                return None
            template_values = found.groupdict()
        elif target.strip("/") != route.strip("/"):
            return None

        path = self.pattern.strip("/")
        for name, constraint in self._placeholders.items():
            if name in template_values:
                value = template_values[name]
            elif name in remaining:
                value = str(remaining.pop(name))
            else:
                return None
            if not constraint.fullmatch(value):
                return None
            path = PLACEHOLDER.sub(lambda m, n=name, v=value: v if m.group("name") == n else m.group(0), path)
        return path, remaining


class Router:
    """Resolves request paths to controller/action pairs."""

    def __init__(self, rules: Iterable[RouteRule], default_route: str = "site/index"):
        self.rules: Tuple[RouteRule, ...] = tuple(rules)
        self.default_route = default_route

    def match(self, path: str, method: str = "GET") -> Optional[RouteMatch]:
        normalized = path.strip("/")
        for rule in self.rules:
            result = rule.match(normalized)
            if result is not None:
                logger.debug(f"{method} /{normalized} matched rule {rule.pattern!r} -> {result.route}")
                return result

        if not normalized and self.default_route:
            controller, action = parse_route(self.default_route)
            return RouteMatch(controller=controller, action=action, params={})

        logger.debug(f"{method} /{normalized} matched no rule")
        return None

    def resolve(self, path: str, method: str = "GET") -> RouteMatch:
        result = self.match(path, method)
        if result is None:
            raise RouteError(path)
        return result

    def create_url(self, route: str, params: Optional[Mapping[str, object]] = None) -> str:
        controller, action = parse_route(route)
        route = f"{controller}/{action}"
        values = {key: str(value) for key, value in (params or {}).items() if value is not None}

        for rule in self.rules:
            built = rule.build(route, values)
            if built is None:
                continue
            path, remaining = built
            return _with_query("/" + path, remaining)

        return _with_query("/" + route, values)


def _with_query(path: str, params: Mapping[str, str]) -> str:
    if not params:
        return path
    return f"{path}?{urlencode(params)}"
