import asyncio
import codecs

import pytest

from _saxflow.events import NodeKind
from _saxflow.exceptions import InvalidOperation, MalformedMarkupError
from _saxflow.options import ParserOptions
from _saxflow.plugins.builtin_tokenizer import BuiltinTokenizer
from _saxflow.utils import detect_encoding

from tests.conftest import SAMPLE_XML


def tokenize(*chunks, **options) -> list:
    tokenizer = BuiltinTokenizer(ParserOptions(**options))
    result = []
    for kind in NodeKind:
        tokenizer.on(kind, lambda data, kind=kind: result.append((kind, data)))
    for chunk in chunks:
        tokenizer.write(chunk)
    tokenizer.end()
    return result


def simplified(events: list) -> list:
    return [
        (kind, str(data)) if kind is NodeKind.Error else (kind, *data)
        for kind, data in events
    ]


def test_basic_events():
    assert simplified(
        tokenize('<?pi x?><a b="1"><!--c--><![CDATA[d]]>e<f/></a>')
    ) == [
        ("processinginstruction", "pi x"),
        ("tagopen", "a", ' b="1"', False),
        ("comment", "c"),
        ("cdata", "d"),
        ("text", "e"),
        ("tagopen", "f", "", True),
        ("tagclose", "a"),
    ]


def test_chunk_boundaries_dont_matter():
    expected = tokenize(SAMPLE_XML)
    for index in range(1, len(SAMPLE_XML)):
        assert (
            tokenize(SAMPLE_XML[:index], SAMPLE_XML[index:]) == expected
        ), f"split at {index}"


@pytest.mark.parametrize("size", (1, 2, 3, 7, 16))
def test_chunks_of_bytes(size):
    data = SAMPLE_XML.encode()
    chunks = [data[i : i + size] for i in range(0, len(data), size)]
    assert tokenize(*chunks) == tokenize(SAMPLE_XML)


def test_text_is_reported_verbatim():
    assert simplified(tokenize("<a> &amp; \r\n </a>")) == [
        ("tagopen", "a", "", False),
        ("text", " &amp; \r\n "),
        ("tagclose", "a"),
    ]


def test_text_outside_the_root():
    assert simplified(tokenize("before<a/>after")) == [
        ("text", "before"),
        ("tagopen", "a", "", True),
        ("text", "after"),
    ]


def test_quoted_angle_brackets_in_attributes():
    assert simplified(tokenize("<a b='>' c=\"/>\"/>")) == [
        ("tagopen", "a", " b='>' c=\"/>\"", True),
    ]


def test_doctype_is_skipped():
    assert simplified(
        tokenize('<!DOCTYPE root [<!ENTITY x "<y>">]>\n<root/>')
    ) == [
        ("text", "\n"),
        ("tagopen", "root", "", True),
    ]


@pytest.mark.parametrize(
    ("encoding", "data"),
    (
        ("utf-8", codecs.BOM_UTF8 + "<a>ä</a>".encode()),
        ("utf-16-le", codecs.BOM_UTF16_LE + "<a>ä</a>".encode("utf-16-le")),
        (
            "iso-8859-1",
            '<?xml version="1.0" encoding="iso-8859-1"?><a>ä</a>'.encode("latin-1"),
        ),
    ),
)
def test_decoding(encoding, data):
    assert detect_encoding(data[:64]).lower() == encoding
    events = simplified(tokenize(*(data[i : i + 1] for i in range(len(data)))))
    assert ("text", "ä") in events


def test_encoding_option():
    events = simplified(tokenize("<a>ö</a>".encode("cp1252"), encoding="cp1252"))
    assert events[1] == ("text", "ö")


@pytest.mark.parametrize(
    ("chunks", "message", "position"),
    (
        (("<a></b>",), "Unclosed tag <a>, found </b> instead.", 3),
        (("<a>", "</b>"), "Unclosed tag <a>, found </b> instead.", 3),
        (("</a>",), "Unexpected closing tag </a>.", 0),
        (("<a><b></b>",), "The input ended with unclosed tags: <a>", None),
        (("<a/><b",), "The input ended within a markup construct.", 4),
        (("<!ELEMENT x>",), "Unrecognized sequence.", 0),
        (("<>",), "Tag name expected.", 0),
    ),
)
def test_malformed_markup(chunks, message, position):
    events = tokenize(*chunks)
    kind, error = events[-1]
    assert kind is NodeKind.Error
    assert isinstance(error, MalformedMarkupError)
    assert error.message == message
    assert error.position == position
    assert not any(kind is NodeKind.Error for kind, _ in events[:-1])


def test_no_events_after_failure():
    events = tokenize("<a></b>", "<c/>")
    assert [kind for kind, _ in events] == [NodeKind.TagOpen, NodeKind.Error]


def test_error_without_listener_is_raised():
    tokenizer = BuiltinTokenizer(ParserOptions())
    with pytest.raises(MalformedMarkupError):
        tokenizer.write("</a>")


def test_saturation():
    async def main():
        tokenizer = BuiltinTokenizer(ParserOptions(tokenizer_high_water_mark=4))
        assert tokenizer.write("<a>")
        assert not tokenizer.write("<b/>")
        assert tokenizer.saturated
        await tokenizer.drain()
        assert not tokenizer.saturated
        assert tokenizer.write("</a>") is False
        await tokenizer.drain()
        tokenizer.end()

    asyncio.run(main())


def test_write_after_end():
    tokenizer = BuiltinTokenizer(ParserOptions())
    tokenizer.write("<a/>")
    tokenizer.end()
    with pytest.raises(InvalidOperation):
        tokenizer.write("<b/>")


def test_listeners():
    tokenizer = BuiltinTokenizer(ParserOptions())
    received = []

    def listener(data):
        received.append(data.name)

    tokenizer.on(NodeKind.TagOpen, listener)
    tokenizer.write("<a>")
    tokenizer.remove_listener(NodeKind.TagOpen, listener)
    tokenizer.write("<b/>")
    tokenizer.on(NodeKind.TagOpen, listener)
    tokenizer.remove_all_listeners()
    tokenizer.write("<c/></a>")
    tokenizer.end()

    assert received == ["a"]


def test_error_event_must_carry_an_exception():
    tokenizer = BuiltinTokenizer(ParserOptions())
    with pytest.raises(TypeError):
        tokenizer.emit(NodeKind.Error, "not an exception")
