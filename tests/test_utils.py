from datetime import date, datetime

import pytest

from regulacao.utils.dates import age_on, isoformat, parse_iso_datetime
from regulacao.utils.masking import mask_cpf, mask_cns, format_cpf, only_digits


@pytest.mark.parametrize("raw,expected", [
    ("52998224725", "529.xxx.247-xx"),
    ("529.982.247-25", "529.xxx.247-xx"),
    ("12345", "123xx"),
    ("", None),
    (None, None),
])
def test_mask_cpf(raw, expected):
    assert mask_cpf(raw) == expected


@pytest.mark.parametrize("raw,expected", [
    ("898001160660008", "898xxxxxx008"),
    ("1234", "xxxx"),
    (None, None),
])
def test_mask_cns(raw, expected):
    assert mask_cns(raw) == expected


def test_format_cpf():
    assert format_cpf("52998224725") == "529.982.247-25"
    assert format_cpf("529.982.247-25") == "529.982.247-25"
    assert format_cpf("123") == "123"
    assert format_cpf(None) is None
    assert only_digits("a1-2.3") == "123"


def test_age_on():
    assert age_on(date(1990, 6, 30), today=date(2026, 6, 29)) == 35
    assert age_on(date(1990, 6, 30), today=date(2026, 6, 30)) == 36
    assert age_on(None) is None


def test_isoformat():
    assert isoformat(datetime(2026, 10, 18, 9, 30, 15, 999)) == "2026-10-18T09:30:15Z"
    assert isoformat(date(2026, 10, 18)) == "2026-10-18"
    assert isoformat(None) is None


@pytest.mark.parametrize("raw,expected", [
    ("2026-11-03T09:00", datetime(2026, 11, 3, 9, 0)),
    ("2026-11-03T09:00:00Z", datetime(2026, 11, 3, 9, 0)),
    ("2026-11-03T09:00:00-03:00", datetime(2026, 11, 3, 12, 0)),
])
def test_parse_iso_datetime(raw, expected):
    assert parse_iso_datetime(raw) == expected


def test_parse_iso_datetime_rejects_garbage():
    with pytest.raises(ValueError):
        parse_iso_datetime("amanhã")


def test_parse_iso_datetime_can_require_offset():
    assert parse_iso_datetime("2026-10-20T08:00-03:00", require_offset=True) == datetime(2026, 10, 20, 11, 0)
    with pytest.raises(ValueError):
        parse_iso_datetime("2026-10-20T08:00", require_offset=True)
