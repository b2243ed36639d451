from typing import Any, Union

from .client import AsyncClient
from .types import Configuration


class Resource:
    """Base class for API resources.

    Construction is free: no configuration is read and no client exists until
    `client` is first accessed, which binds to the shared client for this
    resource's configuration.
    """

    client_class = AsyncClient

    def __init__(self, configuration: Union[Configuration, None] = None, **kwargs):
        self._configuration = (configuration or Configuration()).replace(**kwargs)
        self._client: Union[AsyncClient, None] = None
        self.defaults: dict[str, Any] = {}

    @property
    def client(self) -> AsyncClient:
        if self._client is None:
            self._client = self.client_class.use(self._configuration)
        return self._client

    @client.setter
    def client(self, client: AsyncClient) -> None:
        self._client = client

    def set_defaults(self, **options) -> "Resource":
        """Set default options sent with every request; later calls merge over earlier ones."""
        self.defaults = {**self.defaults, **{k: v for k, v in options.items() if v is not None}}
        return self
