"""Controller/action calling convention.

A controller is a :class:`Controller` subclass registered under an id in a
:class:`ControllerRegistry`; its actions are methods marked with
:func:`action`. The :class:`Dispatcher` turns a :class:`RouteMatch` into an
:class:`ActionResult`:

1. the controller and action are looked up in the registry,
2. the action's HTTP method allow-list is checked,
3. route, query and CLI parameters are bound to the action's arguments by
   name and coerced to their annotated types,
4. the action runs and its return value is normalised.

Errors raised anywhere in these steps are converted at the boundary
(:meth:`Dispatcher.handle`) into the error payload and handed to the
configured error action.
"""

import dataclasses
import inspect
import logging
import typing
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Type, Union

from .config import AppConfig
from .errors import (
    BindingError,
    ErrorPayload,
    HttpError,
    MethodNotAllowedError,
    RouteError,
    error_payload,
)
from .routing import RouteMatch, Router, parse_route
from .validation import coerce_param, validate_identifier


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Rendered:
    body: str
    status_code: int = 200
    media_type: str = "text/html"
    headers: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Redirect:
    location: str
    status_code: int = 302
    headers: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Data:
    payload: Any
    status_code: int = 200
    headers: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ExitCode:
    code: int = 0


ActionResult = Union[Rendered, Redirect, Data, ExitCode]


def action(func: Optional[Callable] = None, *, methods: Optional[Sequence[str]] = None):
    """Mark a controller method as a routable action.

    Usable bare (``@action``) or with an HTTP method allow-list
    (``@action(methods=["POST"])``).
    """
    def decorate(fn: Callable) -> Callable:
        fn._action_methods = tuple(m.upper() for m in methods) if methods else None
        return fn

    if func is not None:
        return decorate(func)
    return decorate


@dataclass(frozen=True)
class ActionContext:
    config: AppConfig
    router: Router
    controller_id: str = ""
    method: Optional[str] = "GET"
    query: Mapping[str, str] = field(default_factory=dict)
    services: Mapping[str, Any] = field(default_factory=dict)
    error: Optional[ErrorPayload] = None
    exception: Optional[BaseException] = None


class Controller:
    default_action: str = "index"

    def __init__(self, context: ActionContext):
        self.context = context

    @property
    def id(self) -> str:
        """The id this controller was dispatched under."""
        return self.context.controller_id

    @property
    def config(self) -> AppConfig:
        return self.context.config

    def render(self, body: str, status_code: int = 200) -> Rendered:
        return Rendered(body=body, status_code=status_code)

    def redirect(self, route: str, **params) -> Redirect:
        return Redirect(location=self.context.router.create_url(route, params))

    def as_json(self, payload: Any, status_code: int = 200) -> Data:
        return Data(payload=payload, status_code=status_code)


def _action_id(method_name: str) -> str:
    return method_name.replace("_", "-")


class ControllerRegistry:
    """Explicit table of routable controllers and their actions."""

    def __init__(self):
        self._controllers: Dict[str, Type[Controller]] = {}
        self._actions: Dict[str, Dict[str, Callable]] = {}

    def add(self, controller_id: str, controller_cls: Type[Controller]) -> Type[Controller]:
        if not validate_identifier(controller_id):
            raise ValueError(f"Invalid controller id: {controller_id!r}")
        if controller_id in self._controllers:
            raise ValueError(f"Controller already registered: {controller_id}")

        actions = {
            _action_id(name): member
            for name, member in inspect.getmembers(controller_cls, predicate=inspect.isfunction)
            if hasattr(member, "_action_methods")
        }
        self._controllers[controller_id] = controller_cls
        self._actions[controller_id] = actions
        return controller_cls

    def register(self, controller_id: str) -> Callable[[Type[Controller]], Type[Controller]]:
        def decorate(controller_cls: Type[Controller]) -> Type[Controller]:
            return self.add(controller_id, controller_cls)
        return decorate

    def get(self, controller_id: str) -> Optional[Type[Controller]]:
        return self._controllers.get(controller_id)

    def actions(self, controller_id: str) -> Dict[str, Callable]:
        return dict(self._actions.get(controller_id, {}))

    def routes(self) -> List[str]:
        return [
            f"{controller_id}/{action_id}"
            for controller_id in sorted(self._controllers)
            for action_id in sorted(self._actions[controller_id])
        ]

    def resolve(self, controller_id: str, action_id: str) -> Tuple[Type[Controller], Callable]:
        controller_cls = self._controllers.get(controller_id)
        if controller_cls is None:
            raise RouteError(f"{controller_id}/{action_id}")
        func = self._actions[controller_id].get(action_id or controller_cls.default_action)
        if func is None:
            raise RouteError(f"{controller_id}/{action_id}")
        return controller_cls, func


def _unwrap_optional(annotation: Any) -> Any:
    args = typing.get_args(annotation)
    if type(None) in args:
        rest = [arg for arg in args if arg is not type(None)]
        if len(rest) == 1:
            return rest[0]
    return annotation


def bind_params(func: Callable, params: Mapping[str, Any], positional: Sequence[str] = ()) -> Dict[str, Any]:
    """Match parameters to the action's arguments by name.

    Positional values (console only) fill the arguments that have no named
    value, in declaration order.
    """
    signature = inspect.signature(func)
    hints = typing.get_type_hints(func)
    pending = list(positional)
    kwargs: Dict[str, Any] = {}
    missing: List[str] = []

    for name, parameter in list(signature.parameters.items())[1:]:
        if parameter.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        if params.get(name) is not None:
            raw = params[name]
        elif pending:
            raw = pending.pop(0)
        elif parameter.default is not inspect.Parameter.empty:
            continue
        else:
            missing.append(name)
            continue
        kwargs[name] = coerce_param(name, raw, _unwrap_optional(hints.get(name, str)))

    if missing:
        raise BindingError(missing[0], f"Missing required parameters: {', '.join(missing)}")
    if pending:
        raise BindingError(pending[0], f"Too many arguments: {' '.join(pending)}")
    return kwargs


def normalize_result(result: Any, console: bool = False) -> ActionResult:
    if isinstance(result, (Rendered, Redirect, Data, ExitCode)):
        return result
    if result is None:
        return ExitCode(0) if console else Rendered(body="")
    if isinstance(result, bool):
        raise TypeError(f"Unsupported action result type: {type(result).__name__}")
    if isinstance(result, int) and console:
        return ExitCode(result)
    if isinstance(result, str):
        return Rendered(body=result)
    if isinstance(result, (dict, list)):
        return Data(payload=result)
    raise TypeError(f"Unsupported action result type: {type(result).__name__}")


class Dispatcher:
    def __init__(self, config: AppConfig, registry: ControllerRegistry, router: Optional[Router] = None,
                 services: Optional[Mapping[str, Any]] = None):
        self.config = config
        self.registry = registry
        self.services = dict(services or {})
        self.router = router or Router(config.url_rules, default_route=config.default_route)

    def dispatch(
        self,
        match: RouteMatch,
        method: Optional[str] = "GET",
        query: Optional[Mapping[str, str]] = None,
        args: Sequence[str] = (),
    ) -> ActionResult:
        controller_cls, func = self.registry.resolve(match.controller, match.action)

        # The method filter runs before binding so a rejected request has no side effects.
        allowed = func._action_methods
        if method is not None and allowed and method.upper() not in allowed:
            raise MethodNotAllowedError(method.upper(), allowed)

        query = dict(query or {})
        params = {**query, **match.params}
        kwargs = bind_params(func, params, positional=args)

        context = ActionContext(
            config=self.config,
            router=self.router,
            controller_id=match.controller,
            method=method.upper() if method else None,
            query=query,
            services=self.services,
        )
        logger.debug(f"Running action {match.route} with {sorted(kwargs)}")
        result = func(controller_cls(context), **kwargs)
        return normalize_result(result, console=self.config.is_console)

    def handle(self, path: str, method: str = "GET", query: Optional[Mapping[str, str]] = None,
               as_data: bool = False) -> ActionResult:
        """Resolve and dispatch a web request, never letting an error escape."""
        try:
            match = self.router.resolve(path, method)
            return self.dispatch(match, method, query)
        except Exception as exc:
            return self.handle_error(exc, as_data=as_data)

    def handle_error(self, exc: BaseException, as_data: bool = False) -> ActionResult:
        payload = error_payload(exc)
        if isinstance(exc, HttpError) and payload.status_code < 500:
            logger.warning(f"{payload.name} ({payload.status_code}): {payload.message}")
        else:
            logger.error(f"Unhandled {type(exc).__name__} in action: {exc}", exc_info=exc)

        headers: Dict[str, str] = {}
        if isinstance(exc, MethodNotAllowedError):
            headers["Allow"] = ", ".join(exc.allowed)

        result: Optional[ActionResult] = None
        if self.config.error_route and not as_data:
            result = self._run_error_action(payload, exc)
        if result is None:
            result = Data(payload=payload.to_dict(), status_code=payload.status_code)
        if headers and not isinstance(result, ExitCode):
            result = dataclasses.replace(result, headers={**result.headers, **headers})
        return result

    def _run_error_action(self, payload: ErrorPayload, exc: BaseException) -> Optional[ActionResult]:
        try:
            controller_id, action_id = parse_route(self.config.error_route)
            controller_cls, func = self.registry.resolve(controller_id, action_id)
            context = ActionContext(
                config=self.config,
                router=self.router,
                controller_id=controller_id,
                services=self.services,
                error=payload,
                exception=exc,
            )
            return normalize_result(func(controller_cls(context)))
        except Exception as error_exc:
            logger.error(f"Error action {self.config.error_route} failed: {error_exc}", exc_info=True)
            return None

    def run_console(self, argv: Sequence[str]) -> ActionResult:
        """Dispatch ``route [args...] [--name=value...]`` without an HTTP method."""
        route = argv[0] if argv else self.config.default_route
        try:
            controller_id, action_id = parse_route(route)
        except ValueError:
            raise RouteError(route)

        options: Dict[str, str] = {}
        positional: List[str] = []
        for arg in argv[1:]:
            if arg.startswith("--") and len(arg) > 2:
                name, _, value = arg[2:].partition("=")
                options[name.replace("-", "_")] = value if value or "=" in arg else "1"
            else:
                positional.append(arg)

        match = RouteMatch(controller=controller_id, action=action_id, params={})
        return self.dispatch(match, method=None, query=options, args=positional)
