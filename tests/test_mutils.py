import pytest

from dongletel.mutils import enum2str, str2enum

DTMF = ("off", "inband", "relax")


@pytest.mark.parametrize("index", range(len(DTMF)))
def test_enum2str_in_range(index):
    assert enum2str(index, DTMF) == DTMF[index]


def test_enum2str_out_of_range_uses_unknown():
    assert enum2str(len(DTMF), DTMF) == "unknown"


def test_enum2str_negative_uses_default():
    assert enum2str(-1, DTMF, "n/a") == "n/a"


def test_enum2str_custom_default_only_when_out_of_range():
    assert enum2str(0, DTMF, "n/a") == "off"


def test_str2enum_case_insensitive():
    index = str2enum("RELAX", DTMF)
    assert DTMF[index] == "relax"


def test_str2enum_round_trip():
    for name in DTMF:
        assert enum2str(str2enum(name, DTMF), DTMF) == name


def test_str2enum_missing_returns_none():
    assert str2enum("loud", DTMF) is None


def test_str2enum_first_match_wins():
    options = ("a", "A", "b")
    assert str2enum("a", options) == str2enum("A", options)
    assert options[str2enum("A", options)] == "a"