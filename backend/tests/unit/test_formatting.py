from app.utils.formatting import clamp, hm, is_weekend, md_k, norm_id, weekday_k, ymd


def test_ymd_and_hm_slice_local_time():
    iso = "2025-05-01T10:30:00+09:00"
    assert ymd(iso) == "2025-05-01"
    assert hm(iso) == "10:30"
    assert ymd(None) == ""
    assert hm("") == ""


def test_korean_date_labels():
    # 2025-05-01 is a Thursday
    assert weekday_k("2025-05-01") == "목"
    assert md_k("2025-05-01") == "5월 1일(목)"
    assert md_k(None) == ""


def test_is_weekend():
    assert is_weekend("2025-05-03") is True
    assert is_weekend("2025-05-05") is False
    assert is_weekend(None) is False


def test_norm_id_decodes_trims_and_lowercases():
    assert norm_id("  Film%5FA ") == "film_a"
    assert norm_id(42) == "42"


def test_clamp():
    assert clamp(5, 0, 3) == 3
    assert clamp(-1, 0, 3) == 0
    assert clamp(2, 0, 3) == 2
