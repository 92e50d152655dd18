import pytest

from scraper.errors import SelectorError, SelectorErrorKind


def test_end_of_line_message():
    err = SelectorError(SelectorErrorKind.END_OF_LINE)
    assert str(err) == "Unexpected EOL"
    assert err.description() == "Unexpected EOL"


def test_unexpected_token_quotes_detail():
    err = SelectorError(SelectorErrorKind.UNEXPECTED_TOKEN, "<")
    message = str(err)
    assert message.startswith("Token ")
    assert message.endswith(" was not expected")
    assert '"<"' in message
    assert err.description() == "Token was not expected"


def test_quote_escapes_special_characters():
    err = SelectorError(SelectorErrorKind.INVALID_AT_RULE, 'a"b\\c')
    assert '\\"' in str(err)
    assert "\\\\" in str(err)
    assert str(err).startswith("Invalid @-rule ")


def test_pseudo_element_messages():
    colon = SelectorError(SelectorErrorKind.EXPECTED_COLON_ON_PSEUDO_ELEMENT, "x")
    ident = SelectorError(SelectorErrorKind.EXPECTED_IDENTITY_ON_PSEUDO_ELEMENT, "y")
    assert str(colon).startswith("Expected a ':' token for pseudoelement, got ")
    assert '"x"' in str(colon)
    assert str(ident).startswith("Expected identity for pseudoelement, got ")
    assert '"y"' in str(ident)
    assert colon.description() == "Missing colon character on pseudoelement"
    assert ident.description() == "Missing pseudoelement identity"


def test_unexpected_parse_error_carries_detail():
    err = SelectorError(SelectorErrorKind.UNEXPECTED_SELECTOR_PARSE_ERROR, "boom")
    assert str(err).startswith("Unexpected error occurred.")
    assert str(err).endswith("\nboom")
    assert err.description() == "Unexpected error"


@pytest.mark.parametrize(
    "kind, text",
    [
        (SelectorErrorKind.INVALID_AT_RULE_BODY, "The body of an @-rule was invalid"),
        (SelectorErrorKind.QUAL_RULE_INVALID, "The qualified name was invalid"),
    ],
)
def test_fixed_messages(kind, text):
    assert str(SelectorError(kind)) == text


def test_is_value_error_with_kind_and_message():
    err = SelectorError(SelectorErrorKind.QUAL_RULE_INVALID)
    assert isinstance(err, ValueError)
    assert err.kind is SelectorErrorKind.QUAL_RULE_INVALID
    assert str(err) == "The qualified name was invalid"
    assert err.description() == "The qualified name was invalid"