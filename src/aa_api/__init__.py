from . import identities
from .client import USER_AGENT, VERSION, AsyncClient, Client, ClientRegistry
from .env import parse_env_file, resolve_configuration
from .errors import AAError, ApiError, ConfigurationError, TimeoutError  # noqa: A004
from .identities import Identities
from .policies import RetryPolicy
from .resources import Resource
from .types import Configuration, ResolvedConfiguration

__version__ = VERSION

__all__ = [
    "Configuration",
    "ResolvedConfiguration",
    "RetryPolicy",
    "Client",
    "AsyncClient",
    "ClientRegistry",
    "Resource",
    "Identities",
    "identities",
    "AAError",
    "ApiError",
    "ConfigurationError",
    "TimeoutError",
    "resolve_configuration",
    "parse_env_file",
    "USER_AGENT",
]
