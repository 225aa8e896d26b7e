import pytest

from dongletel.pdu_fields import (
    NUMBER_TYPE_INTERNATIONAL,
    PduError,
    code2digit,
    digit2code,
    parse_byte,
    parse_number,
    parse_sca,
    parse_timestamp,
    relative_validity,
    store_number,
)


@pytest.mark.parametrize(
    "digit, code",
    [("0", "0"), ("9", "9"), ("*", "A"), ("#", "B"), ("a", "C"), ("B", "D"), ("c", "E")],
)
def test_digit2code_known(digit, code):
    assert digit2code(digit) == code


@pytest.mark.parametrize("digit", ["x", "+", " ", "d", "F"])
def test_digit2code_invalid(digit):
    assert digit2code(digit) is None


@pytest.mark.parametrize("digit", list("0123456789*#ABC"))
def test_code_digit_round_trip(digit):
    assert code2digit(digit2code(digit)) == digit


def test_code2digit_filler_is_empty():
    assert code2digit("F") == ""


@pytest.mark.parametrize("code", ["f", "G", "+"])
def test_code2digit_invalid(code):
    with pytest.raises(PduError):
        code2digit(code)


def test_relative_validity_table_bounds():
    assert relative_validity(720) == 143
    assert relative_validity(1440) == 167
    assert relative_validity(43200) == 196
    assert relative_validity(635040) == 255
    assert relative_validity(635041) == 0xFF


def test_relative_validity_monotonic():
    values = [relative_validity(m) for m in range(5, 700000, 97)]
    assert values == sorted(values)
    assert all(0 <= v <= 255 for v in values)


@pytest.mark.parametrize("number", ["1", "12", "12345", "*100#", "123456789012"])
def test_store_number_round_trip(number):
    encoded = store_number(number)
    assert len(encoded) % 2 == 0
    parsed, pos = parse_number("%02X" % NUMBER_TYPE_INTERNATIONAL + encoded, 0, len(number))
    assert parsed == "+" + number
    assert pos == 2 + len(encoded)


def test_store_number_odd_length_padded():
    encoded = store_number("123")
    assert encoded[-2] == "F"


def test_store_number_invalid_digit():
    with pytest.raises(PduError):
        store_number("12x")


def test_parse_byte():
    assert parse_byte("1F00", 0) == (0x1F, 2)
    assert parse_byte("1F00", 2) == (0, 4)


@pytest.mark.parametrize("text, pos", [("1", 0), ("G0", 0), ("0G", 0), ("00", 2)])
def test_parse_byte_errors(text, pos):
    with pytest.raises(PduError):
        parse_byte(text, pos)


def test_parse_number_national_has_no_plus():
    encoded = store_number("12345")
    number, pos = parse_number("81" + encoded, 0, 5)
    assert number == "12345"
    assert pos == 2 + len(encoded)


def test_parse_number_filler_in_first_position():
    with pytest.raises(PduError):
        parse_number("811F", 0, 2)


def test_parse_number_filler_with_even_digits():
    with pytest.raises(PduError):
        parse_number("81F1", 0, 2)


def test_parse_number_too_short():
    with pytest.raises(PduError):
        parse_number("91", 0, 4)


def test_parse_sca_empty():
    assert parse_sca("00") == 2


def test_parse_sca_with_address():
    sca = "07" + "91" + store_number("123456789012")
    assert parse_sca(sca + "0400") == len(sca)


def test_parse_sca_too_short():
    with pytest.raises(PduError):
        parse_sca("0791")


def test_parse_timestamp():
    assert parse_timestamp("X" * 20, 3) == 17
    with pytest.raises(PduError):
        parse_timestamp("0" * 13, 0)