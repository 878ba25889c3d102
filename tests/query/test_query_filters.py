from efs_backend.features.query import parse_query_filter
from efs_backend.features.query.filters import parse_non_negative_int


def test_blank_values_are_absent():
    query = parse_query_filter({"keyword": "  ", "ext": "", "tags": "", "folders": " , ", "orderBy": ""})
    assert query.keyword is None
    assert query.extensions == ()
    assert query.tags == ()
    assert query.folders == ()
    assert query.order_by is None


def test_comma_separated_lists_are_trimmed():
    query = parse_query_filter({"tags": " x, y ,,z", "folders": "F1"})
    assert query.tags == ("x", "y", "z")
    assert query.folders == ("F1",)


def test_extensions_are_deduplicated():
    query = parse_query_filter({"ext": "jpg,.JPG,png"})
    assert query.extensions == (".jpg", ".png")


def test_paging_defaults():
    query = parse_query_filter({})
    assert (query.limit, query.offset) == (100, 0)
    query = parse_query_filter({"limit": "7", "offset": "3"})
    assert (query.limit, query.offset) == (7, 3)


def test_parse_non_negative_int():
    assert parse_non_negative_int("0", 100) == 0
    assert parse_non_negative_int("12", 100) == 12
    assert parse_non_negative_int("-1", 100) == 100
    assert parse_non_negative_int("1.5", 100) == 100
    assert parse_non_negative_int("abc", 100) == 100
    assert parse_non_negative_int(None, 5) == 5
    assert parse_non_negative_int(True, 5) == 5


def test_unicode_digits_that_int_rejects_fall_back():
    # "²" is a digit to str.isdigit() but not a decimal int() accepts.
    assert parse_non_negative_int("²", 100) == 100
    assert parse_query_filter({"limit": "²", "offset": "³"}).limit == 100
    # Decimal digits of other scripts are still integers.
    assert parse_non_negative_int("١٢", 100) == 12
