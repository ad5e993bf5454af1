"""
Unit tests for HTTP request parsing.
"""

import pytest

from minihttp.core.reader import LineReader
from minihttp.errors import (
    BadContentLengthError,
    BadHeaderError,
    BadStartLineError,
    BodyTooLargeError,
    LineTooLongError,
    ParseError,
    UnexpectedEOFError,
    UnknownMethodError,
)
from minihttp.http.request import (
    HeaderBlock,
    HeaderField,
    HTTPRequest,
    Method,
    RequestParser,
    parse_request,
)


class TestRequestParser:
    """Tests for RequestParser class."""

    def test_parse_simple_get(self, sample_get_request: bytes):
        """Test parsing a simple GET request."""
        parser = RequestParser()
        reader = LineReader.from_bytes(sample_get_request)
        request = parser.parse(reader, ("127.0.0.1", 12345))

        assert request.method is Method.GET
        assert request.target == "/user-agent"
        assert request.client_address == ("127.0.0.1", 12345)
        assert request.body is None
        assert request.has_body is False

    def test_parse_headers(self, sample_get_request: bytes):
        """Test that headers are parsed correctly."""
        request = parse_request(sample_get_request)

        assert request.headers.get("Host") == "localhost:4221"
        assert request.user_agent == "pytest/8.0"
        assert request.headers.get("Accept") == "*/*"
        assert len(request.headers) == 3

    def test_parse_post_with_body(self, sample_post_request: bytes):
        """Test parsing POST request with a body."""
        request = parse_request(sample_post_request)

        assert request.method is Method.POST
        assert request.target == "/files/greeting.txt"
        assert request.body == b"hello, world"
        assert request.content_length == 12

    def test_body_reads_exactly_content_length(self):
        """Trailing bytes beyond Content-Length stay in the reader."""
        reader = LineReader.from_bytes(
            b"POST /files/hello HTTP/1.1\r\nContent-Length: 5\r\n\r\nworld!"
        )
        request = RequestParser().parse(reader)

        assert request.body == b"world"
        assert reader.pending == 1

    def test_zero_content_length_is_empty_body(self):
        request = parse_request(b"POST /files/e HTTP/1.1\r\nContent-Length: 0\r\n\r\n")
        assert request.body == b""
        assert request.has_body is True

    def test_post_without_content_length_has_no_body(self):
        request = parse_request(b"POST /files/x HTTP/1.1\r\n\r\nignored")
        assert request.body is None

    def test_binary_body(self):
        body = bytes(range(256))
        data = b"POST /files/b HTTP/1.1\r\nContent-Length: 256\r\n\r\n" + body
        assert parse_request(data).body == body

    def test_no_headers(self):
        request = parse_request(b"GET /echo/abc HTTP/1.1\r\n\r\n")
        assert request.target == "/echo/abc"
        assert len(request.headers) == 0

    def test_target_kept_verbatim(self):
        request = parse_request(b"GET /echo/a%20b?x=1 HTTP/1.1\r\n\r\n")
        assert request.target == "/echo/a%20b?x=1"

    def test_target_may_contain_spaces(self):
        """Only the first space separates method from target."""
        request = parse_request(b"GET /echo/a b HTTP/1.1\r\n\r\n")
        assert request.target == "/echo/a b"

    def test_non_ascii_target_round_trips(self):
        raw = "/echo/café".encode("utf-8")
        request = parse_request(b"GET " + raw + b" HTTP/1.1\r\n\r\n")
        assert request.target.encode("latin-1") == raw


class TestStartLineErrors:
    """Start-line validation."""

    @pytest.mark.parametrize("line", [
        b"GET / HTTP/1.0\r\n",
        b"GET / http/1.1\r\n",
        b"GET /\r\n",
        b"garbage\r\n",
        b"\r\n",
    ])
    def test_wrong_version(self, line: bytes):
        with pytest.raises(BadStartLineError):
            parse_request(line + b"\r\n")

    def test_missing_target(self):
        with pytest.raises(BadStartLineError):
            parse_request(b"GET HTTP/1.1\r\n\r\n")

    def test_target_without_slash(self):
        with pytest.raises(BadStartLineError):
            parse_request(b"GET echo HTTP/1.1\r\n\r\n")

    @pytest.mark.parametrize("method", [b"PUT", b"DELETE", b"get", b"HEAD"])
    def test_unknown_method(self, method: bytes):
        with pytest.raises(UnknownMethodError):
            parse_request(method + b" / HTTP/1.1\r\n\r\n")

    def test_all_are_parse_errors(self):
        with pytest.raises(ParseError):
            parse_request(b"PATCH / HTTP/1.1\r\n\r\n")


class TestHeaderParsing:
    """Header block rules."""

    def test_split_on_first_colon(self):
        request = parse_request(b"GET / HTTP/1.1\r\nHost: localhost:4221\r\n\r\n")
        assert request.headers.get("Host") == "localhost:4221"

    def test_whitespace_trimmed(self):
        request = parse_request(b"GET / HTTP/1.1\r\nUser-Agent:   foo/1.0  \r\n\r\n")
        assert request.user_agent == "foo/1.0"

    def test_names_are_case_sensitive(self):
        request = parse_request(b"GET / HTTP/1.1\r\nuser-agent: foo\r\n\r\n")
        assert request.user_agent is None
        assert request.headers.get("user-agent") == "foo"

    def test_first_duplicate_wins(self):
        request = parse_request(
            b"GET / HTTP/1.1\r\nUser-Agent: first\r\nUser-Agent: second\r\n\r\n"
        )
        assert request.user_agent == "first"
        assert request.headers.get_all("User-Agent") == ["first", "second"]

    def test_empty_value_dropped(self):
        request = parse_request(b"GET / HTTP/1.1\r\nX-Empty:\r\nHost: h\r\n\r\n")
        assert "X-Empty" not in request.headers
        assert request.headers.get("Host") == "h"

    def test_empty_name_rejected(self):
        with pytest.raises(BadHeaderError):
            parse_request(b"GET / HTTP/1.1\r\n: value\r\n\r\n")

    def test_line_without_colon_ends_block(self):
        """Anything after a colon-less line is not a header."""
        reader = LineReader.from_bytes(
            b"GET / HTTP/1.1\r\nHost: h\r\nnot a header\r\nX-Late: 1\r\n"
        )
        request = RequestParser().parse(reader)
        assert "X-Late" not in request.headers
        assert reader.read_line() == b"X-Late: 1\r\n"

    def test_bytes_after_early_end_become_body(self):
        """A colon-less line ends the headers; Content-Length bytes follow it."""
        request = parse_request(
            b"POST /files/x HTTP/1.1\r\nContent-Length: 4\r\nbogus\r\nabcd"
        )
        assert request.body == b"abcd"
        assert len(request.headers) == 1

    def test_bytes_after_early_end_ignored_without_length(self):
        reader = LineReader.from_bytes(
            b"POST /files/x HTTP/1.1\r\nHost: h\r\nbogus\r\nabcd"
        )
        request = RequestParser().parse(reader)
        assert request.body is None
        assert request.has_body is False
        assert reader.pending == 4

    def test_latin1_value_preserved(self):
        raw = "agent/é".encode("utf-8")
        request = parse_request(b"GET / HTTP/1.1\r\nUser-Agent: " + raw + b"\r\n\r\n")
        assert request.user_agent.encode("latin-1") == raw


class TestContentLength:
    """Content-Length validation."""

    @pytest.mark.parametrize("value", [b"-1", b"abc", b"+5", b"5 5", b"0x10", b"1.5"])
    def test_invalid_values(self, value: bytes):
        with pytest.raises(BadContentLengthError):
            parse_request(b"POST /files/a HTTP/1.1\r\nContent-Length: " + value + b"\r\n\r\n")

    def test_over_limit(self):
        with pytest.raises(BodyTooLargeError):
            parse_request(
                b"POST /files/a HTTP/1.1\r\nContent-Length: 11\r\n\r\n",
                max_body_size=10,
            )

    def test_at_limit(self):
        request = parse_request(
            b"POST /files/a HTTP/1.1\r\nContent-Length: 10\r\n\r\n0123456789",
            max_body_size=10,
        )
        assert request.body == b"0123456789"

    def test_body_shorter_than_declared(self):
        with pytest.raises(UnexpectedEOFError):
            parse_request(b"POST /files/a HTTP/1.1\r\nContent-Length: 10\r\n\r\nshort")


class TestTruncatedInput:
    """Stream ends or overflows before the request is complete."""

    def test_eof_in_headers(self):
        with pytest.raises(UnexpectedEOFError):
            parse_request(b"GET / HTTP/1.1\r\nHost: h\r\n")

    def test_oversized_header_line(self):
        parser = RequestParser()
        data = b"GET / HTTP/1.1\r\nX-Big: " + b"a" * 500 + b"\r\n\r\n"
        reader = LineReader.from_bytes(data, max_line_length=128)
        with pytest.raises(LineTooLongError):
            parser.parse(reader)


class TestHeaderBlock:
    """Tests for HeaderBlock."""

    def test_from_pairs(self):
        block = HeaderBlock.from_pairs([("A", "1"), ("B", "2")])
        assert list(block) == [HeaderField("A", "1"), HeaderField("B", "2")]

    def test_get_default(self):
        block = HeaderBlock()
        assert block.get("Missing") is None
        assert block.get("Missing", "x") == "x"

    def test_equality(self):
        assert HeaderBlock.from_pairs([("A", "1")]) == HeaderBlock.from_pairs([("A", "1")])
        assert HeaderBlock.from_pairs([("A", "1")]) != HeaderBlock.from_pairs([("a", "1")])


class TestHTTPRequest:
    """Tests for HTTPRequest."""

    def test_is_immutable(self):
        request = HTTPRequest(method=Method.GET, target="/")
        with pytest.raises(AttributeError):
            request.target = "/other"

    def test_defaults(self):
        request = HTTPRequest(method=Method.GET, target="/")
        assert request.body is None
        assert request.content_length is None
        assert request.user_agent is None
        assert len(request.headers) == 0
