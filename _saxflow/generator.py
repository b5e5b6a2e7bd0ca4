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

import logging
from typing import TYPE_CHECKING, Any, Optional

from _saxflow.attributes import parse_open_tag_attributes
from _saxflow.events import NodeKind
from _saxflow.options import make_options
from _saxflow.plugins import plugin_manager
from _saxflow.queue import EventQueue
from _saxflow.sources import load_source
from _saxflow.utils import aclose, aiterate, iterate

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterable, Iterator
    from types import SimpleNamespace

    from _saxflow.options import ParserOptions
    from _saxflow.plugins import TokenizerInterface
    from _saxflow.typing import Event, EventRecords, InputSource


logger = logging.getLogger(__name__)


def _attached_queue(options: ParserOptions) -> tuple[TokenizerInterface, EventQueue]:
    tokenizer = plugin_manager.get_tokenizer(options.preferred_tokenizers)(options)
    queue = EventQueue(options)
    queue.attach(tokenizer)
    return tokenizer, queue


def _detach_queue(queue: EventQueue):
    if queue:
        logger.debug("Discarding %i queued events.", len(queue))
    queue.detach()


def _raise_errors(events: Iterable[Event]) -> Iterator[Event]:
    for event in events:
        if event[0] is NodeKind.Error:
            raise event[1]
        yield event


async def stream_events(
    source: InputSource,
    options: Optional[ParserOptions] = None,
    *,
    loader_config: Optional[SimpleNamespace] = None,
    **kwargs: Any,
) -> AsyncIterator[Event]:
    """
    Tokenizes the markup from a source and yields the event records lazily.  Chunks
    are only obtained from the source when the consumer asks for more records than
    are queued.

    :param source: Anything that a registered loader can handle, see
                   :func:`load_source`.
    :param options: A :class:`ParserOptions` instance, its fields can alternatively
                    be passed as keyword arguments.
    :param loader_config: Configuration data for the loaders.

    Malformed markup is raised as :exc:`MalformedMarkupError` after all preceding
    records were yielded.  Closing the generator before it's exhausted detaches it
    from the tokenizer.

    .. code-block:: python

        async for event in stream_events(Path("document.xml"), include="tagopen"):
            print(event)
    """
    options = make_options(options, kwargs)
    chunks = load_source(source, loader_config)
    tokenizer, queue = _attached_queue(options)

    try:
        for event in _raise_errors(queue.drain()):
            yield event

        async for chunk in aiterate(chunks):
            if not tokenizer.write(chunk):
                for event in _raise_errors(queue.drain()):
                    yield event
                await tokenizer.drain()

            for event in _raise_errors(queue.drain()):
                yield event

        tokenizer.end()
        for event in _raise_errors(queue.drain()):
            yield event

    finally:
        _detach_queue(queue)
        if chunks is not source:
            await aclose(chunks)


def parse_events(
    source: InputSource,
    options: Optional[ParserOptions] = None,
    *,
    loader_config: Optional[SimpleNamespace] = None,
    **kwargs: Any,
) -> Iterator[Event]:
    """
    The synchronous counterpart of :func:`stream_events` for sources that aren't
    read asynchronously.
    """
    options = make_options(options, kwargs)
    chunks = load_source(source, loader_config)
    tokenizer, queue = _attached_queue(options)

    try:
        for chunk in iterate(chunks):
            # saturation doesn't matter without an event loop
            tokenizer.write(chunk)
            yield from _raise_errors(queue.drain())

        tokenizer.end()
        yield from _raise_errors(queue.drain())

    finally:
        _detach_queue(queue)
        if chunks is not source and (close := getattr(chunks, "close", None)):
            close()


async def map_open_tag_attributes(events: EventRecords) -> AsyncIterator[Event]:
    """
    Yields the records from a synchronous or asynchronous iterable with the attributes
    of tag open records parsed into a mapping.

    .. code-block:: python

        async for event in map_open_tag_attributes(stream_events(source)):
            ...
    """
    async for event in aiterate(events):
        yield parse_open_tag_attributes(event)


def iterate_open_tag_attributes(events: Iterable[Event]) -> Iterator[Event]:
    """The synchronous counterpart of :func:`map_open_tag_attributes`."""
    for event in events:
        yield parse_open_tag_attributes(event)


__all__ = (
    iterate_open_tag_attributes.__name__,
    map_open_tag_attributes.__name__,
    parse_events.__name__,
    stream_events.__name__,
)
