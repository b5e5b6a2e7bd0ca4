# Copyright (C) 2018-'25  Frank Sachsenheim
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

from __future__ import annotations

import re
from collections import deque
from typing import TYPE_CHECKING, Final, Optional

from _saxflow.events import NodeKind
from _saxflow.exceptions import InvalidOperation

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from _saxflow.events import ContentData, TagCloseData, TagOpenData
    from _saxflow.options import ParserOptions
    from _saxflow.plugins import TokenizerInterface
    from _saxflow.typing import Event, Listener

    Append = Callable[[Event], None]


# line breaks, Unicode space separators and the Byte Order Mark count as white
# space, the information separators U+001C to U+001F and NEL don't
is_whitespace: Final = re.compile(
    "[\t\n\v\f\r \u00a0\u1680\u2000-\u200a\u2028\u2029\u202f\u205f\u3000\ufeff]*"
).fullmatch


# listener factories


def _tag_open_listener(append: Append, options: ParserOptions, include) -> Listener:
    kind = NodeKind.TagOpen
    close = NodeKind.TagClose

    if kind not in include:
        # only the closing of self-closing tags is reported

        def listener(data: TagOpenData):
            if data.is_self_closing:
                append((close, data.name))

    elif close in include:
        if options.report_self_closing:

            def listener(data: TagOpenData):
                append((kind, data.name, data.attributes, data.is_self_closing))
                if data.is_self_closing:
                    append((close, data.name))

        else:

            def listener(data: TagOpenData):
                append((kind, data.name, data.attributes))
                if data.is_self_closing:
                    append((close, data.name))

    elif options.report_self_closing:

        def listener(data: TagOpenData):
            append((kind, data.name, data.attributes, data.is_self_closing))

    else:

        def listener(data: TagOpenData):
            append((kind, data.name, data.attributes))

    return listener


def _tag_close_listener(append: Append, options: ParserOptions, include) -> Listener:
    def listener(data: TagCloseData):
        append((NodeKind.TagClose, data.name))

    return listener


def _text_listener(append: Append, options: ParserOptions, include) -> Listener:
    if options.no_empty_text:

        def listener(data: ContentData):
            if not is_whitespace(data.contents):
                append((NodeKind.Text, data.contents))

    else:

        def listener(data: ContentData):
            append((NodeKind.Text, data.contents))

    return listener


def _contents_listener(kind: NodeKind):
    def factory(append: Append, options: ParserOptions, include) -> Listener:
        def listener(data: ContentData):
            append((kind, data.contents))

        return listener

    return factory


LISTENER_FACTORIES: Final = {
    NodeKind.TagOpen: _tag_open_listener,
    NodeKind.TagClose: _tag_close_listener,
    NodeKind.Text: _text_listener,
    NodeKind.CData: _contents_listener(NodeKind.CData),
    NodeKind.Comment: _contents_listener(NodeKind.Comment),
    NodeKind.ProcessingInstruction: _contents_listener(
        NodeKind.ProcessingInstruction
    ),
}


# the adapter


class EventQueue:
    """
    Collects the events that a tokenizer emits as records in a first-in-first-out
    queue.  The listeners are derived once from the given options, only the kinds of
    events that are included are listened to, plus tag open events to close
    self-closing tags when only tag close events are included.  Errors are always
    queued as :attr:`NodeKind.Error` records.

    Records are only added while the tokenizer processes input and are removed with
    :meth:`drain` after that.  The queue itself isn't exposed.

    :param options: The options that define which events are queued and how.
    """

    __slots__ = ("_queue", "include", "listeners", "options", "tokenizer")

    def __init__(self, options: ParserOptions):
        self._queue: deque[Event] = deque()
        self.include: Final = options.normalized_include()
        self.options: Final = options
        self.tokenizer: Optional[TokenizerInterface] = None

        append = self._queue.append
        listened = set(self.include)
        if NodeKind.TagClose in listened:
            listened.add(NodeKind.TagOpen)
        self.listeners: Final[dict[NodeKind, Listener]] = {
            kind: LISTENER_FACTORIES[kind](append, options, self.include)
            for kind in sorted(listened)
        }
        self.listeners[NodeKind.Error] = lambda error: append((NodeKind.Error, error))

    def __bool__(self) -> bool:
        return bool(self._queue)

    def __len__(self) -> int:
        return len(self._queue)

    def __repr__(self):
        return (
            f"<{self.__class__.__name__} include={sorted(self.include)} "
            f"pending={len(self._queue)}>"
        )

    def attach(self, tokenizer: TokenizerInterface):
        """Registers the listeners with a tokenizer."""
        if self.tokenizer is not None:
            raise InvalidOperation("The queue is already attached to a tokenizer.")
        for kind, listener in self.listeners.items():
            tokenizer.on(kind, listener)
        self.tokenizer = tokenizer

    def detach(self):
        """Removes the listeners from the tokenizer and discards any queued record."""
        if (tokenizer := self.tokenizer) is not None:
            for kind, listener in self.listeners.items():
                tokenizer.remove_listener(kind, listener)
            self.tokenizer = None
        self._queue.clear()

    def drain(self) -> Iterator[Event]:
        """
        Yields and removes the queued records in the order they were added.  Records
        that aren't consumed when the iteration is abandoned stay queued.
        """
        queue = self._queue
        while queue:
            yield queue.popleft()


__all__ = (EventQueue.__name__,)
