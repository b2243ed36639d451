import hashlib
from dataclasses import dataclass

# Tokens are accepted by the API for 30 minutes
TOKEN_TTL_MS = 1_800_000

_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def to_radix(value: int, base: int = 32) -> str:
    """Render a non-negative integer in the given base using lowercase digits."""
    if value == 0:
        return "0"
    out = []
    while value:
        value, rem = divmod(value, base)
        out.append(_DIGITS[rem])
    return "".join(reversed(out))


def make_token(key_id: str, secret: str, now: int) -> str:
    # Wire format shared with the server: key id + base-32 ms timestamp + md5 hex
    rendered = to_radix(now, 32)
    digest = hashlib.md5(f"{rendered}{secret}".encode(), usedforsecurity=False).hexdigest()
    return f"{key_id}{rendered}{digest}"


@dataclass
class TokenState:
    expire_time: int = 0  # ms since epoch; 0 until the first token is generated
    authorization: str | None = None

    def is_valid(self, now: int) -> bool:
        return now < self.expire_time

    def refresh(self, key_id: str, secret: str, now: int) -> str:
        self.authorization = f"Bearer {make_token(key_id, secret, now)}"
        self.expire_time = now + TOKEN_TTL_MS
        return self.authorization
