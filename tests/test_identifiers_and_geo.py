import pytest

from pgops.core.errors import IdentifierError
from pgops.core.geo import coords_to_wkt
from pgops.core.identifiers import ident, ident_for_body, validate_identifier


@pytest.mark.parametrize("name", ["", "a\x00b", "x" * 64, "é" * 32])
def test_validate_identifier_rejects_impossible_names(name: str):
    with pytest.raises(IdentifierError):
        validate_identifier(name)


def test_validate_identifier_allows_quotes_and_spaces():
    assert validate_identifier('My "odd" schema') == 'My "odd" schema'
    assert validate_identifier("x" * 63) == "x" * 63


def test_ident_validates_every_part():
    with pytest.raises(IdentifierError, match="table"):
        ident("public", "", kind="table")


def test_ident_for_body_rejects_dollar():
    with pytest.raises(IdentifierError, match=r"\$"):
        ident_for_body("ro$user", kind="role")


def test_coords_to_wkt_example():
    assert coords_to_wkt("-34.618000, -58.388972") == "POINT(-58.388972 -34.618)"


def test_coords_to_wkt_integers_and_small_values():
    assert coords_to_wkt("10,20") == "POINT(20 10)"
    assert coords_to_wkt("0.00001, -0.0") == "POINT(0 0.00001)"


@pytest.mark.parametrize("value", ["", "1", "1,2,3", "a, b", "91, 0", "0, 181", "nan, 0"])
def test_coords_to_wkt_rejects_bad_input(value: str):
    with pytest.raises(ValueError):
        coords_to_wkt(value)
