import pytest

from magmalab.cipher import (
    CipherContext,
    ErrorKind,
    GOST_R_3412_2015_SBOX,
    InvalidArgumentError,
    MalformedTableError,
    SBoxRegistry,
    SubstitutionTable,
    validate_table,
)
from magmalab.cipher.sbox import GOST_R_3411_94_TEST_SBOX, is_valid_table


def _identity_table():
    return list(range(16)) * 8


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("table", [GOST_R_3412_2015_SBOX, GOST_R_3411_94_TEST_SBOX])
def test_reference_tables_are_valid(table):
    assert validate_table(table) == tuple(table)


def test_identity_table_is_accepted():
    assert is_valid_table(_identity_table())


def test_rows_are_accepted():
    rows = [list(range(15, -1, -1)) for _ in range(8)]
    t = SubstitutionTable.coerce(rows)
    assert t.row(3) == tuple(range(15, -1, -1))


def test_from_rows_accepts_eight_rows():
    t = SubstitutionTable.from_rows(SubstitutionTable(GOST_R_3412_2015_SBOX).rows())
    assert t.values == GOST_R_3412_2015_SBOX


@pytest.mark.parametrize("rows", [
    [tuple(range(16)) * 2] * 4,
    [tuple(range(8))] * 16,
    [tuple(range(16))] * 7,
    [tuple(range(16))] * 7 + [tuple(range(15))],
    None,
])
def test_from_rows_rejects_wrong_shape(rows):
    with pytest.raises(InvalidArgumentError):
        SubstitutionTable.from_rows(rows)


@pytest.mark.parametrize("group", range(8))
def test_repeated_value_is_rejected(group):
    table = _identity_table()
    table[16 * group + 5] = 6  # 6 appears twice, 5 missing
    with pytest.raises(MalformedTableError) as info:
        validate_table(table)
    assert info.value.group == group
    assert info.value.kind is ErrorKind.MALFORMED_TABLE


def test_out_of_range_value_is_rejected():
    table = _identity_table()
    table[0] = 16
    with pytest.raises(MalformedTableError):
        validate_table(table)


@pytest.mark.parametrize("bad", [None, [0] * 127, [0] * 129, "0123", [[0] * 16] * 7, 42])
def test_wrong_shape_is_invalid_argument(bad):
    with pytest.raises(InvalidArgumentError):
        validate_table(bad)


def test_non_integer_entries_rejected():
    table = _identity_table()
    table[3] = 3.0
    with pytest.raises(InvalidArgumentError):
        validate_table(table)


def test_malformed_table_keeps_previous_table():
    ctx = CipherContext(sbox=GOST_R_3412_2015_SBOX)
    before = ctx.sbox
    bad = list(GOST_R_3412_2015_SBOX)
    bad[127] = bad[126]
    with pytest.raises(MalformedTableError):
        ctx.set_sbox(bad)
    assert ctx.sbox is before


def test_malformed_table_on_fresh_context_leaves_it_unset():
    ctx = CipherContext()
    with pytest.raises(MalformedTableError):
        ctx.set_sbox([0] * 128)
    assert ctx.sbox is None


# ---------------------------------------------------------------------------
# Table value
# ---------------------------------------------------------------------------

def test_table_is_immutable_copy():
    source = list(GOST_R_3412_2015_SBOX)
    t = SubstitutionTable.coerce(source)
    source[0] = 0
    assert t.values[0] == 0xc
    with pytest.raises(Exception):
        t.values = ()  # frozen dataclass


def test_substitute_uses_group_of_nibble_index():
    t = SubstitutionTable(GOST_R_3412_2015_SBOX)
    assert t.substitute(0, 0) == 0xc
    assert t.substitute(7, 15) == 0x2


def test_inverse_rows():
    t = SubstitutionTable(GOST_R_3412_2015_SBOX)
    for row, inv in zip(t.rows(), t.inverse_rows()):
        assert [inv[v] for v in row] == list(range(16))


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

def test_registry_builtins():
    reg = SBoxRegistry()
    assert reg.list_names() == ["gostr3411-94-test", "tc26-z"]
    assert reg.get("tc26-z").values == GOST_R_3412_2015_SBOX


def test_registry_unknown_name():
    with pytest.raises(KeyError):
        SBoxRegistry().get("nope")


def test_registry_register_and_reject():
    reg = SBoxRegistry()
    reg.register("identity", _identity_table())
    assert reg.exists("identity")
    with pytest.raises(MalformedTableError):
        reg.register("broken", [1] * 128)
    assert not reg.exists("broken")


def test_context_resolves_names_through_its_registry():
    reg = SBoxRegistry()
    reg.register("identity", _identity_table())
    ctx = CipherContext(sbox="identity", registry=reg)
    assert ctx.sbox.values == tuple(_identity_table())


def test_context_unknown_table_name():
    with pytest.raises(InvalidArgumentError):
        CipherContext(sbox="does-not-exist")
