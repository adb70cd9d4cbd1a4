import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from .env import EnvironmentMap
from .errors import ConfigError, ConfigErrorReason
from .routing import RouteRule


logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

REQUIRED_KEYS = (
    "APP_ID",
    "APP_NAME",
    "DB_DRIVER",
    "DB_HOST",
    "DB_PORT",
    "DB_NAME",
    "DB_USER",
    "DB_PASSWORD",
)

INSECURE_COOKIE_KEY = "change-this-key-in-production"
DEFAULT_ADMIN_EMAIL = "admin@example.com"
DEFAULT_CORS_ORIGINS = "http://localhost:3000"
DEFAULT_CHARSET = "utf8mb4"

CONSOLE_ID_SUFFIX = "-console"
CONSOLE_NAME_SUFFIX = " Console"

WEB_URL_RULES = (
    RouteRule("", "site/index"),
    RouteRule(r"product/view/<id:\d+>", "product/view"),
    RouteRule(r"product/update/<id:\d+>", "product/update"),
    RouteRule(r"product/delete/<id:\d+>", "product/delete"),
    RouteRule(r"<controller:[\w-]+>/<action:[\w-]+>", "<controller>/<action>"),
    RouteRule(r"<controller:[\w-]+>", "<controller>/index"),
)


@dataclass(frozen=True)
class DatabaseDescriptor:
    """Connection parameters handed to the data-access layer."""

    driver: str
    host: str
    port: int
    name: str
    user: str
    password: str = field(repr=False)
    charset: str = DEFAULT_CHARSET

    @property
    def dsn(self) -> str:
        return f"{self.driver}:host={self.host};port={self.port};dbname={self.name}"

    def url(self, redact: bool = True) -> str:
        password = "***" if redact else self.password
        return f"{self.driver}://{self.user}:{password}@{self.host}:{self.port}/{self.name}"


@dataclass(frozen=True)
class LogTarget:
    levels: Tuple[str, ...]
    log_file: str
    categories: Tuple[str, ...] = ()


@dataclass(frozen=True)
class LogConfig:
    trace_level: int
    targets: Tuple[LogTarget, ...]


@dataclass(frozen=True)
class SessionPolicy:
    cookie_validation_key: str = field(repr=False)
    cookie_http_only: bool = True
    cookie_secure_on_https: bool = True
    enable_csrf_validation: bool = True
    enable_cookie_validation: bool = True

    @property
    def insecure_key(self) -> bool:
        return self.cookie_validation_key == INSECURE_COOKIE_KEY


@dataclass(frozen=True)
class AppConfig:
    """Immutable, fully resolved application configuration.

    Built once per process by :func:`build_web_config` or
    :func:`build_console_config` and passed explicitly to the router, the
    dispatcher and the logging setup.
    """

    id: str
    name: str
    debug: bool
    base_path: Path
    runtime_path: Path
    vendor_path: Path
    aliases: Mapping[str, str]
    database: DatabaseDescriptor
    log: LogConfig
    url_rules: Tuple[RouteRule, ...] = ()
    default_route: str = "site/index"
    error_route: Optional[str] = None
    session: Optional[SessionPolicy] = None
    params: Mapping[str, str] = field(default_factory=dict)
    cors_origins: Tuple[str, ...] = ()
    is_console: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "aliases", MappingProxyType(dict(self.aliases)))
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))

    def resolve_alias(self, path: str) -> str:
        """Expand a leading ``@alias`` in ``path``.

        The longest registered alias wins, so ``@webroot/x`` is not read as
        ``@web`` followed by ``root/x``.
        """
        if not path.startswith("@"):
            return path
        for alias in sorted(self.aliases, key=len, reverse=True):
            if path == alias or path.startswith(alias + "/"):
                return self.aliases[alias] + path[len(alias):]
        raise ConfigError(
            ConfigErrorReason.INVALID_VALUE,
            f"Invalid path alias: {path}",
            key=path.split("/", 1)[0],
        )


def _check_required(env: EnvironmentMap) -> None:
    missing = [key for key in REQUIRED_KEYS if key not in env]
    if missing:
        raise ConfigError(
            ConfigErrorReason.MISSING_KEY,
            f"Missing required environment keys: {', '.join(missing)}",
            key=missing[0],
        )


def _build_database(env: EnvironmentMap) -> DatabaseDescriptor:
    raw_port = env.require("DB_PORT")
    try:
        port = int(raw_port)
    except ValueError:
        raise ConfigError(
            ConfigErrorReason.INVALID_VALUE,
            f"DB_PORT must be an integer, got {raw_port!r}",
            key="DB_PORT",
        )
    return DatabaseDescriptor(
        driver=env.require("DB_DRIVER"),
        host=env.require("DB_HOST"),
        port=port,
        name=env.require("DB_NAME"),
        user=env.require("DB_USER"),
        password=env.require("DB_PASSWORD"),
        charset=env.get("DB_CHARSET") or DEFAULT_CHARSET,
    )


def _build_aliases(base_path: Path) -> Dict[str, str]:
    runtime = base_path / "runtime"
    vendor = base_path / "vendor"
    return {
        "@app": str(base_path),
        "@runtime": str(runtime),
        "@vendor": str(vendor),
        "@webroot": str(base_path / "public"),
        "@web": "/",
    }


def _build_log(env: EnvironmentMap) -> LogConfig:
    trace_level = 3 if env.get_bool("APP_DEBUG") else 0
    return LogConfig(
        trace_level=trace_level,
        targets=(
            LogTarget(levels=("error", "warning"), log_file="@runtime/logs/app.log"),
            LogTarget(levels=("info",), log_file="@runtime/logs/app.log", categories=("application",)),
        ),
    )


def _allowed_origins(env: EnvironmentMap) -> Tuple[str, ...]:
    raw = env.get("CORS_ALLOWED_ORIGINS", DEFAULT_CORS_ORIGINS)
    # Deduplicate while preserving order
    seen = set()
    result: List[str] = []
    for origin in (o.strip() for o in raw.split(",")):
        if origin and origin not in seen:
            seen.add(origin)
            result.append(origin)
    return tuple(result)


def _build_common(env: EnvironmentMap, base_path: Optional[Path]) -> dict:
    _check_required(env)
    base = Path(base_path or env.get("APP_BASE_PATH") or PROJECT_ROOT).resolve()
    return dict(
        id=env.require("APP_ID"),
        name=env.require("APP_NAME"),
        debug=env.get_bool("APP_DEBUG"),
        base_path=base,
        runtime_path=base / "runtime",
        vendor_path=base / "vendor",
        aliases=_build_aliases(base),
        database=_build_database(env),
        log=_build_log(env),
    )


def build_web_config(env: EnvironmentMap, base_path: Optional[Path] = None) -> AppConfig:
    common = _build_common(env, base_path)

    cookie_key = env.get("COOKIE_VALIDATION_KEY")
    if not cookie_key:
        logger.warning(
            "COOKIE_VALIDATION_KEY is not set, using the insecure development default. "
            "Set it before deploying to production."
        )
        cookie_key = INSECURE_COOKIE_KEY

    return AppConfig(
        **common,
        url_rules=WEB_URL_RULES,
        error_route="site/error",
        session=SessionPolicy(cookie_validation_key=cookie_key),
        params={"adminEmail": env.get("ADMIN_EMAIL") or DEFAULT_ADMIN_EMAIL},
        cors_origins=_allowed_origins(env),
    )


def build_console_config(env: EnvironmentMap, base_path: Optional[Path] = None) -> AppConfig:
    common = _build_common(env, base_path)
    common["id"] += CONSOLE_ID_SUFFIX
    common["name"] += CONSOLE_NAME_SUFFIX

    return AppConfig(
        **common,
        default_route="help/index",
        params={"adminEmail": env.get("ADMIN_EMAIL") or DEFAULT_ADMIN_EMAIL},
        is_console=True,
    )
