import pytest
from pydantic import ValidationError

from magmalab.cipher import InvalidArgumentError, MagmaSpec, SBoxRegistry, build_context
from magmalab.config import Settings, load_settings

KEY_HEX = "fffefdfcfbfaf9f8f7f6f5f4f3f2f1f000112233445566778899aabbccddeeff"


def test_spec_defaults():
    spec = MagmaSpec(key_hex=KEY_HEX)
    assert spec.sbox is None
    assert spec.gamma_period is None
    assert spec.seed is None
    assert spec.iv is None
    assert len(spec.key) == 32


def test_spec_with_defaults_uses_settings():
    settings = Settings(default_sbox="gostr3411-94-test", gamma_period=4, global_seed=7)
    resolved = MagmaSpec(key_hex=KEY_HEX).with_defaults(settings)
    assert resolved.sbox == "gostr3411-94-test"
    assert resolved.gamma_period == 4
    assert resolved.seed == 7

    explicit = MagmaSpec(key_hex=KEY_HEX, sbox="tc26-z", gamma_period=2, seed=1).with_defaults(settings)
    assert (explicit.sbox, explicit.gamma_period, explicit.seed) == ("tc26-z", 2, 1)


def test_spec_with_defaults_falls_back_to_environment(monkeypatch):
    load_settings.cache_clear()
    monkeypatch.setenv("MAGMA_DEFAULT_SBOX", "gostr3411-94-test")
    try:
        assert MagmaSpec(key_hex=KEY_HEX).with_defaults().sbox == "gostr3411-94-test"
    finally:
        load_settings.cache_clear()


def test_spec_normalizes_hex():
    spec = MagmaSpec(key_hex="0x" + KEY_HEX.upper(), iv_hex="78 56 34 12")
    assert spec.key_hex == KEY_HEX
    assert spec.iv == b"\x78\x56\x34\x12"


@pytest.mark.parametrize("kwargs", [
    {"key_hex": KEY_HEX[:-2]},
    {"key_hex": "zz" * 32},
    {"key_hex": KEY_HEX, "iv_hex": "785634"},
    {"key_hex": KEY_HEX, "gamma_period": 0},
    {"key_hex": KEY_HEX, "gamma_period": 9},
])
def test_spec_rejects_bad_values(kwargs):
    with pytest.raises(ValidationError):
        MagmaSpec(**kwargs)


def test_build_context_matches_known_answer():
    spec = MagmaSpec(name="kat", key_hex=KEY_HEX, sbox="tc26-z", iv_hex="78563412", gamma_period=8)
    ctx = build_context(spec)
    pt = bytes.fromhex("590a133c6bf0de92")
    assert ctx.encrypt_ecb(pt) == bytes.fromhex("a072f394043f072b")
    assert ctx.encrypt_ctr(pt) == bytes.fromhex("3cb9b7970c11984e")
    assert ctx.gamma_period == 8


def test_build_context_with_custom_registry():
    reg = SBoxRegistry()
    reg.register("identity", list(range(16)) * 8)
    ctx = build_context(MagmaSpec(key_hex=KEY_HEX, sbox="identity"), reg)
    assert ctx.sbox.values == tuple(range(16)) * 8


def test_build_context_unknown_table():
    with pytest.raises(InvalidArgumentError):
        build_context(MagmaSpec(key_hex=KEY_HEX, sbox="missing"))


def test_build_context_takes_omitted_fields_from_settings():
    settings = Settings(default_sbox="gostr3411-94-test", gamma_period=4)
    ctx = build_context(MagmaSpec(key_hex=KEY_HEX), settings=settings)
    assert ctx.gamma_period == 4
    assert ctx.sbox == SBoxRegistry().get("gostr3411-94-test")

    pinned = build_context(MagmaSpec(key_hex=KEY_HEX, sbox="tc26-z"), settings=settings)
    assert pinned.encrypt_block(bytes(8)) != ctx.encrypt_block(bytes(8))
