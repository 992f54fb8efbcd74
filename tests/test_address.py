from leadverify.utils.address import (
    address_contains,
    extract_street_name,
    extract_street_number,
    normalize_address,
    normalize_name,
    owner_matches,
    parse_int,
    parse_money,
)


def test_normalize_address_canonicalizes_suffix_and_directional() -> None:
    assert normalize_address("123 North Main Street, Houston") == "123 N MAIN ST HOUSTON"
    assert normalize_address("  45 w. elm ave #2 ") == "45 W ELM AVE 2"
    assert normalize_address(None) == ""


def test_address_contains_compares_street_line_only() -> None:
    assert address_contains("123 MAIN ST HOUSTON TX 77002", "123 Main Street, Houston, TX")
    assert not address_contains("PO BOX 12 AUSTIN TX", "123 Main Street")
    assert not address_contains("123 MAIN ST", None)


def test_street_number_and_name_split() -> None:
    assert extract_street_number("1500 Marilla St, Dallas") == "1500"
    assert extract_street_name("1500 Marilla St, Dallas") == "Marilla St"
    assert extract_street_number("Marilla St") == ""
    assert extract_street_name("Marilla St") == ""


def test_owner_matching_tolerates_order_and_noise() -> None:
    assert normalize_name("DOE JOHN ET AL") == {"DOE", "JOHN"}
    assert owner_matches("John Doe", "DOE JOHN")
    assert owner_matches("doe", "DOE JOHN & MARY")
    assert not owner_matches("Jane Roe", "DOE JOHN")
    assert not owner_matches(None, "DOE JOHN")


def test_parse_money_and_int() -> None:
    assert parse_money("$250,000") == 250000.0
    assert parse_money("($1,200.50)") == -1200.5
    assert parse_money("N/A") is None
    assert parse_money(12) == 12.0
    assert parse_int("1,850 SF") == 1850
    assert parse_int("Built 1962") == 1962
    assert parse_int("unknown") is None
