import pytest

from _saxflow.events import NodeKind
from _saxflow.exceptions import InvalidOperation, MalformedMarkupError
from _saxflow.options import ParserOptions
from _saxflow.plugins.builtin_tokenizer import BuiltinTokenizer
from _saxflow.queue import EventQueue

from tests.conftest import SAMPLE_EVENTS, SAMPLE_XML, SELF_CLOSING_XML


def queued(*chunks, **options) -> list:
    options = ParserOptions(**options)
    tokenizer = BuiltinTokenizer(options)
    queue = EventQueue(options)
    queue.attach(tokenizer)
    for chunk in chunks:
        tokenizer.write(chunk)
    tokenizer.end()
    return list(queue.drain())


def test_all_kinds():
    assert queued(SAMPLE_XML) == SAMPLE_EVENTS


@pytest.mark.parametrize(
    "include",
    (
        ("tagopen",),
        ("tagclose",),
        ("text", "cdata"),
        ("comment", "processinginstruction"),
        (NodeKind.TagOpen, NodeKind.TagClose),
        "text",
    ),
)
def test_filtering(include):
    kinds = {include} if isinstance(include, str) else set(include)
    assert queued(SAMPLE_XML, include=include) == [
        e for e in SAMPLE_EVENTS if e[0] in kinds
    ]


def test_no_empty_text():
    events = queued(SAMPLE_XML, no_empty_text=True)
    assert events == [
        e for e in SAMPLE_EVENTS if not (e[0] == "text" and not e[1].strip())
    ]
    assert ("text", " this\nis\na\r\n\ttextual\ncontent  ") in events


def test_self_closing_tags_are_closed_when_tag_close_is_included():
    assert queued(SELF_CLOSING_XML, include=("tagopen", "tagclose")) == [
        ("tagopen", "outer", ""),
        ("tagopen", "selfclose", " "),
        ("tagclose", "selfclose"),
        ("tagclose", "outer"),
    ]


def test_self_closing_tags_without_tag_open():
    assert queued(SELF_CLOSING_XML, include="tagclose") == [
        ("tagclose", "selfclose"),
        ("tagclose", "outer"),
    ]


def test_report_self_closing():
    assert queued(
        SELF_CLOSING_XML, include="tagopen", no_empty_text=True, report_self_closing=True
    ) == [
        ("tagopen", "outer", "", False),
        ("tagopen", "selfclose", " ", True),
    ]
    assert queued(
        SELF_CLOSING_XML,
        include=("tagopen", "tagclose"),
        report_self_closing=True,
    ) == [
        ("tagopen", "outer", "", False),
        ("tagopen", "selfclose", " ", True),
        ("tagclose", "selfclose"),
        ("tagclose", "outer"),
    ]


def test_no_self_closing_report_by_default():
    assert queued(SELF_CLOSING_XML, include="tagopen") == [
        ("tagopen", "outer", ""),
        ("tagopen", "selfclose", " "),
    ]


def test_element_structure():
    assert queued('<a x="1"><b/></a>', include=("tagopen", "tagclose")) == [
        ("tagopen", "a", ' x="1"'),
        ("tagopen", "b", ""),
        ("tagclose", "b"),
        ("tagclose", "a"),
    ]


def test_errors_are_always_queued():
    events = queued("<a><!--x--></b>", include="tagopen")
    assert events[0] == ("tagopen", "a", "")
    assert events[1][0] is NodeKind.Error
    assert isinstance(events[1][1], MalformedMarkupError)
    assert len(events) == 2


def test_partial_drain():
    options = ParserOptions()
    tokenizer = BuiltinTokenizer(options)
    queue = EventQueue(options)
    queue.attach(tokenizer)
    tokenizer.write("<a><b/><c/></a>")

    assert len(queue) == 6
    for event in queue.drain():
        assert event == ("tagopen", "a", "")
        break
    assert len(queue) == 5
    assert next(queue.drain()) == ("tagopen", "b", "")
    assert len(queue) == 4


def test_attach_and_detach():
    options = ParserOptions(include="tagopen")
    tokenizer = BuiltinTokenizer(options)
    queue = EventQueue(options)

    queue.attach(tokenizer)
    with pytest.raises(InvalidOperation):
        queue.attach(tokenizer)
    assert set(tokenizer.listeners) == {NodeKind.TagOpen, NodeKind.Error}

    tokenizer.write("<a>")
    assert queue
    queue.detach()
    assert not queue
    assert queue.tokenizer is None
    assert not any(tokenizer.listeners.values())

    tokenizer.write("<b/>")
    assert not queue

    queue.attach(BuiltinTokenizer(options))


def test_self_closing_tags_are_closed_when_only_tag_close_is_included():
    assert queued('<a x="1"><b/></a>', include="tagclose") == [
        ("tagclose", "b"),
        ("tagclose", "a"),
    ]

    options = ParserOptions(include="tagclose")
    queue = EventQueue(options)
    queue.attach(BuiltinTokenizer(options))
    assert set(queue.listeners) == {
        NodeKind.TagOpen,
        NodeKind.TagClose,
        NodeKind.Error,
    }


@pytest.mark.parametrize(
    ("text", "suppressed"),
    (
        ("", True),
        (" \t\r\n", True),
        ("\ufeff", True),
        ("\u00a0\u2003\u3000", True),
        ("\u2028\u2029", True),
        ("\x1c", False),
        ("\x85", False),
        (" x ", False),
    ),
)
def test_no_empty_text_white_space(text, suppressed):
    events = queued(f"<a><b/>{text}</a>", include="text", no_empty_text=True)
    assert events == ([] if suppressed else [("text", text)])
