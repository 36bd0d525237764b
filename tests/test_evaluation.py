
import numpy as np
import pytest

from magmalab.cipher import GOST_R_3412_2015_SBOX, MagmaSpec, SBoxRegistry, SubstitutionTable
from magmalab.cipher.cryptanalysis import (
    _flip_bit,
    _hamming_distance_bytes,
    avalanche_key,
    avalanche_plaintext,
    sbox_ddt,
    sbox_ddt_max,
    sbox_lat,
    sbox_lat_max_abs,
)
from magmalab.config import Settings
from magmalab.evaluation import (
    EvaluationReport,
    analyze_all_tables,
    analyze_sbox,
    analyze_table,
    compute_sac,
    run_evaluation,
)
from magmalab.utils.repro import read_json

KEY_HEX = "fffefdfcfbfaf9f8f7f6f5f4f3f2f1f000112233445566778899aabbccddeeff"
TABLE = SubstitutionTable(GOST_R_3412_2015_SBOX)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def test_bit_helpers():
    assert _flip_bit(b"\x00\x00", 9) == b"\x00\x02"
    assert _hamming_distance_bytes(b"\x0f\x00", b"\x00\x01") == 5
    with pytest.raises(IndexError):
        _flip_bit(b"\x00", 8)


def test_ddt_of_identity_sbox():
    ddt = sbox_ddt(list(range(16)))
    # S(x) ^ S(x ^ dx) == dx for the identity map
    assert np.array_equal(ddt, 16 * np.eye(16, dtype=np.int64))
    assert sbox_ddt_max(list(range(16))) == 16


def test_ddt_rows_sum_to_size():
    ddt = sbox_ddt(list(TABLE.row(0)))
    assert (ddt.sum(axis=1) == 16).all()


def test_lat_of_identity_sbox():
    lat = sbox_lat(list(range(16)))
    assert lat[0, 0] == 16
    assert sbox_lat_max_abs(list(range(16))) == 16


def test_lat_values_are_even_and_bounded():
    lat = sbox_lat(list(TABLE.row(3)))
    assert (lat % 2 == 0).all()
    assert np.abs(lat[1:, 1:]).max() <= 16


def test_avalanche_estimates_are_near_half():
    pt = avalanche_plaintext(TABLE, trials=40, seed=1)
    kk = avalanche_key(TABLE, trials=40, seed=1)
    assert 0.35 < pt["mean"] < 0.65
    assert 0.35 < kk["mean"] < 0.65


# ---------------------------------------------------------------------------
# S-box analysis
# ---------------------------------------------------------------------------

def test_analyze_sbox_reference_table():
    result = analyze_sbox(TABLE, 0, table_name="tc26-z")
    assert result.is_bijective
    assert result.sbox_size == 16
    assert 2 <= result.ddt_max <= 16
    assert "tc26-z[0]" in result.summary()


def test_analyze_table_by_name_covers_all_sboxes():
    results = analyze_table("tc26-z")
    assert [r.index for r in results] == list(range(8))
    assert all(r.is_bijective for r in results)


def test_identity_sbox_is_rated_poor():
    reg = SBoxRegistry()
    reg.register("identity", list(range(16)) * 8)
    results = analyze_table("identity", reg)
    assert all(r.differential_uniformity == "poor" for r in results)
    assert all(r.linearity == "poor" for r in results)


def test_analyze_all_tables():
    results = analyze_all_tables()
    assert len(results) == 16
    assert {r.table_name for r in results} == {"tc26-z", "gostr3411-94-test"}


# ---------------------------------------------------------------------------
# SAC and report
# ---------------------------------------------------------------------------

def test_compute_sac_shape():
    result = compute_sac(TABLE, input_type="plaintext", trials=4, seed=3)
    assert result.num_input_bits == 64
    assert len(result.per_input_bit_mean) == 64
    assert 0.0 <= result.min_bit_prob <= result.global_mean <= result.max_bit_prob <= 1.0
    assert "passes_sac" in result.to_dict()


def test_compute_sac_key_bits():
    result = compute_sac(TABLE, input_type="key", trials=2, seed=3)
    assert result.num_input_bits == 256


def test_compute_sac_rejects_unknown_input():
    with pytest.raises(ValueError):
        compute_sac(TABLE, input_type="iv")


def test_run_evaluation_writes_report(tmp_path):
    settings = Settings(roundtrip_vectors=5, sac_trials=2)
    spec = MagmaSpec(name="eval", key_hex=KEY_HEX, iv_hex="78563412")
    report = run_evaluation(spec, settings, output_dir=tmp_path)

    assert isinstance(report, EvaluationReport)
    assert report.failing_configurations() == []
    assert len(report.sac_results) == 2
    assert len(report.sbox_results) == 8

    files = list(tmp_path.glob("*/report.json"))
    assert len(files) == 1
    data = read_json(files[0])
    assert data["summary"]["roundtrip_all_pass"] is True
    assert data["summary"]["sbox_all_bijective"] is True
    assert "Roundtrip Tests: 1/1" in report.to_summary()


def test_compute_sac_reports_progress():
    calls = []
    compute_sac(TABLE, input_type="plaintext", trials=1, seed=3, progress_callback=lambda i, n: calls.append((i, n)))
    assert calls == [(i, 64) for i in range(64)]


def test_run_evaluation_follows_settings(tmp_path):
    runs = tmp_path / "runs"
    settings = Settings(
        roundtrip_vectors=3,
        sac_trials=1,
        default_sbox="gostr3411-94-test",
        gamma_period=4,
        global_seed=7,
        runs_dir=str(runs),
    )
    report = run_evaluation(MagmaSpec(name="settings", key_hex=KEY_HEX, iv_hex="78563412"), settings)

    assert {r.table_name for r in report.sbox_results} == {"gostr3411-94-test"}
    rt = report.roundtrip_results[0]
    assert rt.sbox == "gostr3411-94-test"
    assert rt.seed == 7
    assert rt.is_perfect
    assert len(list(runs.glob("*_settings/report.json"))) == 1
