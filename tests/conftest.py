import pytest

from aa_api import AsyncClient, Client, ClientRegistry, identities
from aa_api.env import OPTIONS

MOCK_CONFIG = {
    "key_id": "1234123412341234",
    "secret": "12345678123456781234567812345678",
    "origin": "http://api.example.com",
    "timeout": 1e3,
    "retries": 0,
    "delay": 0,
    "backoff": 1,
}


@pytest.fixture(autouse=True)
def _isolated(monkeypatch, tmp_path):
    # no AA_* variables, no stray .env, fresh registries and facade
    for opt in OPTIONS:
        monkeypatch.delenv(opt.variable, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(Client, "_registry", ClientRegistry())
    monkeypatch.setattr(AsyncClient, "_registry", ClientRegistry())
    monkeypatch.setattr(identities, "_shared", None)


@pytest.fixture
def mock_config():
    return dict(MOCK_CONFIG)
