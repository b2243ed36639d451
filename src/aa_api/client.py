import asyncio
import contextlib
import json
import logging
import threading
import time
from typing import Any, Callable, Union
from urllib.parse import urlencode, urljoin

from .env import DEFAULT_ENV_PATH, resolve_configuration
from .errors import ApiError, TimeoutError  # noqa: A004
from .state import TokenState
from .types import Configuration, ResolvedConfiguration

VERSION = "1.0.0"
USER_AGENT = f"python aa-api {VERSION}"

PARSE_ERROR = "Failed to parse response"
CHUNK_SIZE = 65536


# ---------- Registry ----------


class ClientRegistry:
    """Process-wide cache of clients keyed by their input configuration.

    Two configurations with the same fields (None fields ignored) share one client,
    and with it the cached token. Entries are never evicted.
    """

    def __init__(self):
        self._instances: dict[str, _BaseClient] = {}
        self._lock = threading.Lock()

    def use(self, factory: Callable[[Configuration], "_BaseClient"], configuration: Configuration):
        key = configuration.cache_key()
        with self._lock:
            client = self._instances.get(key)
            if client is None:
                client = factory(configuration)
                self._instances[key] = client
            return client


# ---------- Base client (shared state; transport handled by subclasses) ----------


def _query_value(value: Any) -> str:
    # same rendering the API gets from browser/Node clients (URLSearchParams)
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ",".join(_query_value(v) for v in value)
    return str(value)


def _build_path(path: str, query: Union[dict[str, Any], None]) -> str:
    if not query:
        return path
    return f"{path}?{urlencode([(k, _query_value(v)) for k, v in query.items()])}"


def _payload(data: Any, status_code: int) -> Any:
    if isinstance(data, dict) and "error" in data:
        raise ApiError(data["error"], status_code)
    return data


class _BaseClient:
    _registry: ClientRegistry
    # constructor keywords that are not configuration and not part of the registry key
    _client_options: tuple[str, ...] = ("log_level",)

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        # one registry per client flavour
        cls._registry = ClientRegistry()

    def __init__(
        self,
        configuration: Union[Configuration, None] = None,
        log_level: Union[int, None] = None,
        **kwargs,
    ):
        """Initialize a client. Nothing is resolved until the first request.

        Args:
            configuration (Configuration | None): direct configuration
            log_level (int | None): level for the "aa_api" logger
            kwargs: configuration fields (key_id, secret, origin, timeout, retries,
                delay, backoff); these override `configuration`
        """
        self._direct = (configuration or Configuration()).replace(**kwargs)
        self._configuration: Union[ResolvedConfiguration, None] = None
        self.env_path = DEFAULT_ENV_PATH
        self.token = TokenState()
        # WARNING: User-Agent identifies this client library to the API.
        self.headers: dict[str, str] = {"User-Agent": USER_AGENT}
        self._logger = logging.getLogger("aa_api")
        if log_level is not None:
            with contextlib.suppress(Exception):
                self._logger.setLevel(log_level)

    @classmethod
    def use(cls, configuration: Union[Configuration, None] = None, **kwargs):
        """Return the shared client for this configuration, creating it on first use.

        Client options (log_level, session / transport) only apply when the client is
        created; an existing client is returned unchanged.
        """
        options = {k: kwargs.pop(k) for k in list(kwargs) if k in cls._client_options}
        direct = (configuration or Configuration()).replace(**kwargs)
        return cls._registry.use(lambda c: cls(c, **options), direct)

    def _now(self) -> int:
        return int(time.time() * 1000)

    @property
    def configuration(self) -> ResolvedConfiguration:
        if self._configuration is None:
            self.load_configuration()
        return self._configuration

    def load_configuration(self) -> ResolvedConfiguration:
        self._configuration = resolve_configuration(self._direct, env_path=self.env_path)
        return self._configuration

    def ensure_token(self) -> None:
        """Make sure headers carry a token that is valid right now."""
        cfg = self.configuration
        now = self._now()
        if self.token.is_valid(now):
            return
        self.headers["Authorization"] = self.token.refresh(cfg.key_id, cfg.secret, now)
        self._logger.debug(
            f"token generated key_id={cfg.key_id} expires_at={self.token.expire_time}"
        )

    def _url(self, href: str) -> str:
        return urljoin(self.configuration.origin, href)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._direct!r})"


# ---------- Sync client (requests) ----------


class Client(_BaseClient):
    """Blocking client for the AA API backed by requests."""

    _client_options = ("log_level", "session")

    def __init__(
        self,
        configuration: Union[Configuration, None] = None,
        log_level: Union[int, None] = None,
        session=None,
        **kwargs,
    ):
        super().__init__(configuration, log_level=log_level, **kwargs)
        # Optional requests.Session to send through; a new one is used per request otherwise
        self.session = session

    def get(self, path: str, query: Union[dict[str, Any], None] = None) -> Any:
        href = _build_path(path, query)

        def attempt():
            self.ensure_token()
            return self._fetch("GET", href, headers=dict(self.headers))

        return self.configuration.retry_policy.call(attempt)

    def post(self, path: str, body: Union[dict[str, Any], None] = None) -> Any:
        def attempt():
            self.ensure_token()
            headers = {**self.headers, "Content-Type": "application/json"}
            return self._fetch("POST", path, headers=headers, json=body or {})

        return self.configuration.retry_policy.call(attempt)

    def _fetch(self, method: str, href: str, **kwargs) -> Any:
        import requests  # noqa: PLC0415
        import urllib3  # noqa: PLC0415

        url = self._url(href)
        timeout = self.configuration.timeout
        # requests only bounds each connect/read step; the deadline bounds the whole call
        deadline = time.monotonic() + timeout / 1e3
        sess = self.session if self.session is not None else requests.Session()
        resp = None
        self._logger.debug(f"req start method={method} url={url}")
        try:
            resp = sess.request(method, url, timeout=timeout / 1e3, stream=True, **kwargs)
            body = self._read_body(resp, deadline, url, timeout)
        except (requests.Timeout, urllib3.exceptions.TimeoutError) as e:
            raise TimeoutError(url, timeout) from e
        finally:
            if resp is not None:
                resp.close()
            if self.session is None:
                sess.close()
        self._logger.debug(f"req done method={method} url={url} status={resp.status_code}")
        try:
            data = json.loads(body)
        except ValueError:
            data = {"error": PARSE_ERROR}
        return _payload(data, resp.status_code)

    def _read_body(self, resp, deadline: float, url: str, timeout: float) -> bytes:
        # read1 returns after a single read on the socket, so a trickling body
        # cannot hold the call past its deadline by more than one read
        chunks = []
        while True:
            if time.monotonic() >= deadline:
                raise TimeoutError(url, timeout)
            chunk = resp.raw.read1(CHUNK_SIZE, decode_content=True)
            if not chunk:
                return b"".join(chunks)
            chunks.append(chunk)


# ---------- Async client (httpx) ----------


class AsyncClient(_BaseClient):
    """Asyncio client for the AA API backed by httpx.

    Concurrent calls share configuration and token state without locking; two calls
    that both see an expired token simply both regenerate it.
    """

    _client_options = ("log_level", "transport")

    def __init__(
        self,
        configuration: Union[Configuration, None] = None,
        log_level: Union[int, None] = None,
        transport=None,
        **kwargs,
    ):
        super().__init__(configuration, log_level=log_level, **kwargs)
        # Optional httpx.AsyncBaseTransport handed to each httpx.AsyncClient
        self.transport = transport

    async def get(self, path: str, query: Union[dict[str, Any], None] = None) -> Any:
        href = _build_path(path, query)

        async def attempt():
            self.ensure_token()
            return await self._fetch("GET", href, headers=dict(self.headers))

        return await self.configuration.retry_policy.acall(attempt)

    async def post(self, path: str, body: Union[dict[str, Any], None] = None) -> Any:
        async def attempt():
            self.ensure_token()
            headers = {**self.headers, "Content-Type": "application/json"}
            return await self._fetch("POST", path, headers=headers, json=body or {})

        return await self.configuration.retry_policy.acall(attempt)

    async def _fetch(self, method: str, href: str, **kwargs) -> Any:
        import httpx  # noqa: PLC0415

        url = self._url(href)
        timeout = self.configuration.timeout
        self._logger.debug(f"req start method={method} url={url}")
        # httpx timeouts are disabled; the deadline below covers the whole call
        async with httpx.AsyncClient(transport=self.transport, timeout=None) as client:
            try:
                resp = await asyncio.wait_for(
                    client.request(method, url, **kwargs), timeout=timeout / 1e3
                )
            except asyncio.TimeoutError as e:
                raise TimeoutError(url, timeout) from e
        self._logger.debug(f"req done method={method} url={url} status={resp.status_code}")
        try:
            data = resp.json()
        except ValueError:
            data = {"error": PARSE_ERROR}
        return _payload(data, resp.status_code)
