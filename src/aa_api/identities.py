from collections.abc import Mapping
from typing import Any, Union

from .resources import Resource

RequestId = Union[int, str]
TemplateId = int

# Field used when a lookup is called with a single scalar input
LOOKUP_FIELDS: dict[str, str] = {
    "/v1/identities/byDevice": "device",
    "/v1/identities/byEmail": "email",
    "/v1/identities/byId": "id",
    "/v1/identities/byIp": "ip",
    "/v1/identities/byMd5": "md5",
    "/v1/identities/byPhone": "phone",
    "/v1/identities/byVehicle": "vin",
}


class Identities(Resource):
    """Find identities and their associated records by a variety of lookup fields.

    Every lookup accepts either one input or a list of inputs:
        - a scalar (email, ip, ...) is sent as a GET query
        - a mapping of lookup fields is merged into the GET query
        - a list/tuple is POSTed as {"inputs": [...]} and answered with one result per input

    Options:
        request: caller-chosen id echoed back as `requestId`
        template: id of a template used for querying and formatting
    """

    async def _find(
        self,
        path: str,
        inputs: Any,
        request: Union[RequestId, None] = None,
        template: Union[TemplateId, None] = None,
    ) -> dict[str, Any]:
        options = {k: v for k, v in (("request", request), ("template", template)) if v is not None}
        if isinstance(inputs, (list, tuple)):
            body = {**self.defaults, **options, "inputs": list(inputs)}
            return await self.client.post(path, body)
        if isinstance(inputs, Mapping):
            query = {**self.defaults, **options, **inputs}
        else:
            field = LOOKUP_FIELDS.get(path)
            if field is None:
                raise TypeError(f"{path} expects a mapping or a list of mappings")
            query = {**self.defaults, **options, field: inputs}
        return await self.client.get(path, query)

    async def by_any(self, inputs, request=None, template=None) -> dict[str, Any]:
        """Return identities matching any combination of inputs."""
        return await self._find("/v1/identities/byAny", inputs, request, template)

    async def by_device(self, inputs, request=None, template=None) -> dict[str, Any]:
        """Return identities with specific device IDs."""
        return await self._find("/v1/identities/byDevice", inputs, request, template)

    async def by_email(self, inputs, request=None, template=None) -> dict[str, Any]:
        """Return identities with specific email addresses."""
        return await self._find("/v1/identities/byEmail", inputs, request, template)

    async def by_id(self, inputs, request=None, template=None) -> dict[str, Any]:
        """Return identities with specific Audience Acuity IDs."""
        return await self._find("/v1/identities/byId", inputs, request, template)

    async def by_ip(self, inputs, request=None, template=None) -> dict[str, Any]:
        """Return identities with specific IP addresses."""
        return await self._find("/v1/identities/byIp", inputs, request, template)

    async def by_md5(self, inputs, request=None, template=None) -> dict[str, Any]:
        """Return identities with specific MD5 lowercase email hashes."""
        return await self._find("/v1/identities/byMd5", inputs, request, template)

    async def by_phone(self, inputs, request=None, template=None) -> dict[str, Any]:
        """Return identities with specific phone numbers."""
        return await self._find("/v1/identities/byPhone", inputs, request, template)

    async def by_pii(self, inputs, request=None, template=None) -> dict[str, Any]:
        """Return identities matching name, address and zip details."""
        return await self._find("/v1/identities/byPii", inputs, request, template)

    async def by_vehicle(self, inputs, request=None, template=None) -> dict[str, Any]:
        """Return identities with specific vehicle identification numbers."""
        return await self._find("/v1/identities/byVehicle", inputs, request, template)


# ---------- module-level facade over one shared instance ----------

_shared: Union[Identities, None] = None


def shared() -> Identities:
    """Return the process-wide Identities instance, creating it on first access.

    It is configured from the environment / `.env` only and lives until exit.
    """
    global _shared  # noqa: PLW0603
    if _shared is None:
        _shared = Identities()
    return _shared


def set_defaults(**options) -> Identities:
    return shared().set_defaults(**options)


async def by_any(inputs, request=None, template=None):
    return await shared().by_any(inputs, request, template)


async def by_device(inputs, request=None, template=None):
    return await shared().by_device(inputs, request, template)


async def by_email(inputs, request=None, template=None):
    return await shared().by_email(inputs, request, template)


async def by_id(inputs, request=None, template=None):
    return await shared().by_id(inputs, request, template)


async def by_ip(inputs, request=None, template=None):
    return await shared().by_ip(inputs, request, template)


async def by_md5(inputs, request=None, template=None):
    return await shared().by_md5(inputs, request, template)


async def by_phone(inputs, request=None, template=None):
    return await shared().by_phone(inputs, request, template)


async def by_pii(inputs, request=None, template=None):
    return await shared().by_pii(inputs, request, template)


async def by_vehicle(inputs, request=None, template=None):
    return await shared().by_vehicle(inputs, request, template)
