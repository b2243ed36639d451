import logging
import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Union

from .errors import ConfigurationError
from .types import Configuration, ResolvedConfiguration

DEFAULT_ENV_PATH = ".env"

_logger = logging.getLogger("aa_api")


@dataclass(frozen=True)
class _Option:
    name: str
    variable: str
    required: bool
    default: Union[float, int, None]
    coerce: Callable
    minimum: Union[float, int, None] = None


# Resolution order matters: the first missing required option is the one reported.
OPTIONS: tuple[_Option, ...] = (
    _Option("key_id", "AA_KEY_ID", True, None, str),
    _Option("secret", "AA_SECRET", True, None, str),
    _Option("origin", "AA_ORIGIN", True, None, str),
    _Option("timeout", "AA_TIMEOUT", False, 1e4, float),
    _Option("retries", "AA_RETRIES", False, 10, int, minimum=0),
    _Option("delay", "AA_DELAY", False, 1e3, float),
    _Option("backoff", "AA_BACKOFF", False, 1.5, float, minimum=1.0),
)


def parse_env_file(env_path: str) -> dict[str, str]:
    """Parse a simple .env file into a dict without modifying os.environ.

    Supports basic KEY=VALUE pairs (optionally prefixed with `export`), ignoring
    comments and blank lines. Surrounding single/double quotes are stripped if present.
    Only the first `=` splits a line, so values may contain `=`, `#` or quotes.
    """
    values: dict[str, str] = {}
    try:
        with open(env_path, encoding="utf-8") as f:
            for raw_line in f:
                line = raw_line.strip()
                if not line or line.startswith("#"):
                    continue
                if "=" not in line:
                    continue
                key, val = line.split("=", 1)
                key = key.strip()
                if key.startswith("export "):
                    key = key[len("export ") :].strip()
                val = _unquote(val.strip())
                if key:
                    values[key] = val
    except FileNotFoundError:
        # A missing file just means no extra entries
        pass
    return values


def _unquote(val: str) -> str:
    if len(val) >= 2 and val[0] == val[-1] and val[0] in ("'", '"'):  # noqa: PLR2004
        return val[1:-1]
    return val


def resolve_configuration(
    direct: Union[Configuration, None] = None,
    environ: Union[Mapping[str, str], None] = None,
    env_path: str = DEFAULT_ENV_PATH,
) -> ResolvedConfiguration:
    """Merge direct configuration, environment variables and a `.env` file.

    Precedence per option: direct value, then environment variable, then `.env`
    entry. The `.env` file is only read when a required option is still missing.
    Optional options fall back to their defaults; set ones are coerced to numbers.
    Negative retries are raised to 0 and a backoff below 1 is raised to 1.

    Raises:
        ConfigurationError: naming the first required option that is still missing
        ValueError: if a numeric option cannot be converted
    """
    direct = direct or Configuration()
    environ = os.environ if environ is None else environ
    found: dict[str, object] = {}

    for opt in OPTIONS:
        value = getattr(direct, opt.name)
        if value is None:
            value = environ.get(opt.variable) or None
        if value is not None:
            found[opt.name] = value

    if any(opt.required and opt.name not in found for opt in OPTIONS):
        _logger.info(f"client configuration incomplete; reading {env_path!r}")
        file_env = parse_env_file(env_path)
        for opt in OPTIONS:
            if opt.name not in found and file_env.get(opt.variable):
                found[opt.name] = file_env[opt.variable]

    values = {
        opt.name: opt.coerce(found[opt.name]) if opt.name in found else opt.default
        for opt in OPTIONS
    }
    for opt in OPTIONS:
        if opt.minimum is not None and values[opt.name] < opt.minimum:
            _logger.warning(
                f"{opt.name}={values[opt.name]} is below {opt.minimum}; using {opt.minimum}"
            )
            values[opt.name] = opt.minimum
    for opt in OPTIONS:
        if opt.required and values[opt.name] is None:
            raise ConfigurationError(opt.name, opt.variable)

    resolved = ResolvedConfiguration(**values)
    _logger.debug(
        f"client configuration resolved key_id={resolved.key_id} origin={resolved.origin} "
        f"timeout={resolved.timeout:g} retries={resolved.retries} delay={resolved.delay:g} "
        f"backoff={resolved.backoff:g}"
    )
    return resolved
