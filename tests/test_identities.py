import httpx
import pytest

from aa_api import AsyncClient, Configuration, ConfigurationError, Identities, identities


class RecordingClient:
    def __init__(self):
        self.calls = []

    async def get(self, path, query):
        self.calls.append(("GET", path, query))
        return {"identities": []}

    async def post(self, path, body):
        self.calls.append(("POST", path, body))
        return {"results": []}


def test_construction_is_lazy():
    # no configuration anywhere, still fine until a client is needed
    resource = Identities()
    assert resource._client is None
    client = resource.client
    assert isinstance(client, AsyncClient)
    assert resource.client is client
    with pytest.raises(ConfigurationError):
        client.load_configuration()


def test_resource_binds_to_shared_client(mock_config):
    a = Identities(Configuration(**mock_config))
    b = Identities(**mock_config)
    assert a.client is b.client
    assert a.client is AsyncClient.use(**mock_config)


@pytest.mark.asyncio
async def test_scalar_input_uses_lookup_field():
    resource = Identities()
    resource.client = rec = RecordingClient()
    await resource.by_email("a@example.com", request="r1")
    await resource.by_vehicle("VIN123")
    await resource.by_id(42, template=7)
    assert rec.calls == [
        ("GET", "/v1/identities/byEmail", {"request": "r1", "email": "a@example.com"}),
        ("GET", "/v1/identities/byVehicle", {"vin": "VIN123"}),
        ("GET", "/v1/identities/byId", {"template": 7, "id": 42}),
    ]


@pytest.mark.asyncio
async def test_mapping_and_list_inputs():
    resource = Identities().set_defaults(template=3)
    resource.client = rec = RecordingClient()
    await resource.by_pii({"firstName": "Ada", "zip": "02139"})
    await resource.by_phone(["5551234567", 5557654321], request=9)
    assert rec.calls == [
        ("GET", "/v1/identities/byPii", {"template": 3, "firstName": "Ada", "zip": "02139"}),
        (
            "POST",
            "/v1/identities/byPhone",
            {"template": 3, "request": 9, "inputs": ["5551234567", 5557654321]},
        ),
    ]


@pytest.mark.asyncio
async def test_by_any_rejects_scalar():
    resource = Identities()
    resource.client = RecordingClient()
    with pytest.raises(TypeError):
        await resource.by_any("a@example.com")


def test_set_defaults_merges():
    resource = Identities().set_defaults(template=1).set_defaults(request="x")
    assert resource.defaults == {"template": 1, "request": "x"}


@pytest.mark.asyncio
async def test_facade_uses_one_shared_instance(monkeypatch, mock_config):
    for name, var in (("key_id", "AA_KEY_ID"), ("secret", "AA_SECRET"), ("origin", "AA_ORIGIN")):
        monkeypatch.setenv(var, mock_config[name])
    monkeypatch.setenv("AA_RETRIES", "0")
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"identities": [{"id": 1}]})

    assert identities.shared() is identities.shared()
    identities.shared().client.transport = httpx.MockTransport(handler)
    identities.set_defaults(template=5)
    data = await identities.by_ip("10.0.0.1")
    assert data == {"identities": [{"id": 1}]}
    assert str(seen[0].url) == "http://api.example.com/v1/identities/byIp?template=5&ip=10.0.0.1"
