import hashlib

from aa_api.state import TOKEN_TTL_MS, TokenState, make_token, to_radix

NOW = 1741724659397
SECRET = "12345678123456781234567812345678"


def test_to_radix_base32():
    assert to_radix(0) == "0"
    assert to_radix(31) == "v"
    assert to_radix(32) == "10"
    assert to_radix(NOW) == "1im3e2bm5"


def test_make_token_wire_format():
    digest = hashlib.md5(f"1im3e2bm5{SECRET}".encode()).hexdigest()
    assert digest == "f0b13824ee00fc13b4723970d41bf5e5"
    assert make_token("kid", SECRET, NOW) == f"kid1im3e2bm5{digest}"


def test_token_state_window():
    state = TokenState()
    assert state.expire_time == 0
    assert not state.is_valid(NOW)
    header = state.refresh("kid", SECRET, NOW)
    assert header.startswith("Bearer kid1im3e2bm5")
    assert state.expire_time == NOW + TOKEN_TTL_MS
    assert state.is_valid(NOW + TOKEN_TTL_MS - 1)
    assert not state.is_valid(NOW + TOKEN_TTL_MS)
