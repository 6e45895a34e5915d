"""Tests for the value codec."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from rdflib import BNode, Literal, URIRef
from rdflib.namespace import RDF, XSD

from modelld.codec import decode, encode, from_term, infer_datatype, to_literal
from modelld.errors import ArgumentError, DecodeError


class TestRoundTrip:
    """decode(encode(v)) == v for every supported datatype."""

    @pytest.mark.parametrize(
        "value",
        [
            True,
            False,
            24,
            -1,
            0,
            0.5,
            float("inf"),
            Decimal("0.1"),
            datetime(2016, 1, 1, tzinfo=timezone.utc),
            datetime(2016, 1, 1, 12, 30, 15, 500000),
            date(2016, 1, 1),
            "Mr. Cool",
            "",
        ],
    )
    def test_inferred_datatype(self, value):
        lexical, datatype = encode(value)
        assert decode(lexical, datatype) == value

    @pytest.mark.parametrize(
        "value, datatype",
        [
            (0.5, XSD.double),
            (-2.25, XSD.float),
            (Decimal("0.00001"), XSD.decimal),
            (0.5, XSD.decimal),
            (7, XSD.int),
            (True, XSD.boolean),
            ("dan", XSD.string),
        ],
    )
    def test_explicit_datatype(self, value, datatype):
        assert decode(*encode(value, datatype)) == value


class TestDecode:
    def test_boolean_accepts_only_numeric_forms(self):
        assert decode("1", XSD.boolean) is True
        assert decode("0", XSD.boolean) is False

    @pytest.mark.parametrize("lexical", ["true", "false", "yes", "", " 1"])
    def test_boolean_rejects_other_forms(self, lexical):
        with pytest.raises(DecodeError) as excinfo:
            decode(lexical, XSD.boolean)
        assert excinfo.value.lexical == lexical
        assert excinfo.value.datatype == XSD.boolean

    @pytest.mark.parametrize(
        "lexical, datatype",
        [
            ("abc", XSD.integer),
            ("1.5", XSD.integer),
            ("1_000", XSD.integer),
            ("1e3", XSD.decimal),
            ("one", XSD.double),
            ("2016-13-01T00:00:00Z", XSD.dateTime),
            ("2016-01-01", XSD.dateTime),
            ("01/01/2016", XSD.date),
        ],
    )
    def test_malformed_literals(self, lexical, datatype):
        with pytest.raises(DecodeError):
            decode(lexical, datatype)

    def test_decode_error_message_names_literal_and_datatype(self):
        with pytest.raises(DecodeError, match="abc"):
            decode("abc", XSD.integer)

    def test_special_doubles(self):
        assert decode("INF", XSD.double) == float("inf")
        assert decode("-INF", XSD.double) == float("-inf")
        assert decode("NaN", XSD.double) != decode("NaN", XSD.double)

    def test_unknown_datatype_falls_back_to_string(self):
        assert decode("whatever", "http://example.com/custom") == "whatever"

    def test_plain_and_language_strings(self):
        assert decode("dan") == "dan"
        assert decode("dan", RDF.langString) == "dan"

    def test_utc_designator(self):
        assert decode("2016-01-01T00:00:00Z", XSD.dateTime) == datetime(
            2016, 1, 1, tzinfo=timezone.utc
        )

    @pytest.mark.parametrize(
        "lexical, microsecond",
        [
            ("2016-01-01T00:00:00.5Z", 500000),
            ("2016-01-01T00:00:00.25Z", 250000),
            ("2016-01-01T00:00:00.1234567Z", 123456),
        ],
    )
    def test_any_number_of_fractional_digits(self, lexical, microsecond):
        assert decode(lexical, XSD.dateTime) == datetime(
            2016, 1, 1, microsecond=microsecond, tzinfo=timezone.utc
        )

    def test_decimal_is_exact(self):
        value = decode("0.1", XSD.decimal)
        assert isinstance(value, Decimal)
        assert value == Decimal("0.1")


class TestEncode:
    def test_boolean_encodes_numerically(self):
        assert encode(True) == ("1", XSD.boolean)
        assert encode(False) == ("0", XSD.boolean)

    def test_datetime_uses_utc_designator(self):
        lexical, _ = encode(datetime(2016, 1, 1, tzinfo=timezone.utc))
        assert lexical == "2016-01-01T00:00:00Z"

    def test_decimal_never_uses_exponent(self):
        assert encode(1e-05, XSD.decimal)[0] == "0.00001"
        assert encode(Decimal("3"))[0] == "3.0"
        assert encode(3.0, XSD.decimal)[0] == "3.0"

    def test_strings_are_plain(self):
        assert encode("dan") == ("dan", None)

    @pytest.mark.parametrize(
        "value, datatype",
        [
            ("yes", XSD.boolean),
            (1, XSD.boolean),
            (True, XSD.integer),
            ("24", XSD.integer),
            (float("nan"), XSD.decimal),
            (date(2016, 1, 1), XSD.dateTime),
        ],
    )
    def test_values_outside_datatype(self, value, datatype):
        with pytest.raises(ArgumentError):
            encode(value, datatype)

    def test_inference_order(self):
        assert infer_datatype(True) == XSD.boolean
        assert infer_datatype(1) == XSD.integer
        assert infer_datatype(0.5) == XSD.double
        assert infer_datatype(Decimal("0.5")) == XSD.decimal
        assert infer_datatype(datetime(2016, 1, 1)) == XSD.dateTime
        assert infer_datatype(date(2016, 1, 1)) == XSD.date
        assert infer_datatype("x") is None


class TestTerms:
    def test_to_literal_keeps_lexical_form(self):
        literal = to_literal(True)
        assert str(literal) == "1"
        assert literal.datatype == XSD.boolean

    def test_to_literal_with_language(self):
        assert to_literal("Dan", lang="en") == Literal("Dan", lang="en")

    def test_from_term(self):
        assert from_term(Literal("24", datatype=XSD.integer)) == 24
        assert from_term(Literal("Dan", lang="en")) == "Dan"
        assert from_term(URIRef("tel:123")) == "tel:123"
        assert from_term(BNode("b0")) == "b0"
