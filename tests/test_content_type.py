import pytest

from mimeburst.email_parser.content_type import parse_content_type, parse_disposition
from mimeburst.errors import ContentTypeError


def test_media_type_and_parameters():
    info = parse_content_type('Text/HTML; Charset="UTF-8"; format=Flowed')

    assert info.media_type == "text/html"
    assert info.parameters == {"charset": "UTF-8", "format": "Flowed"}
    assert not info.is_multipart


def test_quoted_boundary_with_semicolon_and_escape():
    info = parse_content_type('multipart/mixed; boundary="a\\"b;c=d"')

    assert info.is_multipart
    assert info.get("BOUNDARY") == 'a"b;c=d'


def test_trailing_and_doubled_semicolons_are_tolerated():
    info = parse_content_type("multipart/alternative;; boundary=xyz;")

    assert info.get("boundary") == "xyz"


@pytest.mark.parametrize("value", [
    "",
    "   ",
    "text",
    "text/",
    "/plain",
    "text/plain; charset",
    "text/plain; =utf-8",
    'text/plain; charset="utf-8',
    'text/plain; charset="utf-8" junk',
    "text/plain; charset=utf 8",
    "text/plain; charset=",
    "text/plain; charset=a; Charset=b",
])
def test_malformed_values_fail(value):
    with pytest.raises(ContentTypeError):
        parse_content_type(value)


def test_disposition_needs_no_subtype():
    info = parse_disposition('attachment; filename="Report 2023.pdf"')

    assert info.media_type == "attachment"
    assert info.get("filename") == "Report 2023.pdf"


def test_rfc2231_extended_filename():
    info = parse_disposition("attachment; filename*=utf-8''na%C3%AFve%20file.txt")

    assert info.get("filename") == "naïve file.txt"


def test_rfc2231_continuations():
    info = parse_disposition(
        "attachment; filename*0*=utf-8''caf%C3%A9; filename*1=\"-menu\"; filename*2=.pdf"
    )

    assert info.get("filename") == "café-menu.pdf"


def test_extended_value_wins_over_plain():
    info = parse_disposition(
        "attachment; filename=fallback.txt; filename*=utf-8''real.txt"
    )

    assert info.get("filename") == "real.txt"


def test_undecodable_extended_parameter_is_dropped():
    info = parse_content_type("multipart/mixed; boundary=abc; title*=plain")

    assert info.is_multipart
    assert info.get("boundary") == "abc"
    assert "title" not in info.parameters


def test_undecodable_extended_value_keeps_plain_fallback():
    info = parse_disposition(
        "attachment; filename=fallback.txt; filename*=no-such-charset''x.txt"
    )

    assert info.get("filename") == "fallback.txt"
