import json
from dataclasses import asdict, dataclass, field

from .policies import RetryPolicy


def _normalize(value):
    # 1000 and 1000.0 are the same setting
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


@dataclass(frozen=True)
class Configuration:
    """Client configuration as passed by the caller. Unset fields are None."""

    key_id: str | None = None
    secret: str | None = None
    origin: str | None = None
    # milliseconds
    timeout: float | None = None
    retries: int | None = None
    # milliseconds before the first retry
    delay: float | None = None
    backoff: float | None = None

    def replace(self, **overrides) -> "Configuration":
        values = {k: v for k, v in asdict(self).items() if v is not None}
        values.update({k: v for k, v in overrides.items() if v is not None})
        return Configuration(**values)

    def cache_key(self) -> str:
        """Stable serialization used to deduplicate clients."""
        values = {k: _normalize(v) for k, v in asdict(self).items() if v is not None}
        return json.dumps(values, sort_keys=True)


@dataclass(frozen=True)
class ResolvedConfiguration:
    key_id: str
    secret: str = field(repr=False)
    origin: str
    timeout: float = 1e4
    retries: int = 10
    delay: float = 1e3
    backoff: float = 1.5

    @property
    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(retries=self.retries, delay=self.delay, backoff=self.backoff)
