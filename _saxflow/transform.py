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

import asyncio
import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import TYPE_CHECKING, Any, Final, Optional

from _saxflow.attributes import parse_open_tag_attributes
from _saxflow.events import NodeKind
from _saxflow.exceptions import InvalidOperation
from _saxflow.options import make_options
from _saxflow.plugins import plugin_manager
from _saxflow.queue import EventQueue
from _saxflow.sources import load_source
from _saxflow.utils import aclose, aiterate

if TYPE_CHECKING:
    from types import SimpleNamespace

    from _saxflow.options import ParserOptions
    from _saxflow.typing import Chunk, Event, InputSource, Self


DEFAULT_HIGH_WATER_MARK: Final = 16

_END: Final = object()


logger = logging.getLogger(__name__)


class Transform(ABC):
    """
    A flow-controlled stage that consumes written chunks and produces objects that
    are read asynchronously.  Produced objects are buffered until they're read, a
    :meth:`write` waits until the buffer holds less than ``high_water_mark``
    objects before the chunk is handed to the :meth:`_transform` hook.

    Subclasses implement :meth:`_transform` and can implement :meth:`_flush`,
    :meth:`_read` and :meth:`_destroy`.  Objects are produced with :meth:`push`.

    An exception that a hook raises is a terminal failure of the stage: it is
    raised by the failing :meth:`write` or :meth:`end` call and by any later one,
    readers receive it after all objects that were pushed before.

    Instances can be used as asynchronous context managers that close the stage on
    exit.

    :param high_water_mark: The number of buffered objects from which on no more
                            input is accepted.
    """

    def __init__(self, *, high_water_mark: int = DEFAULT_HIGH_WATER_MARK):
        if high_water_mark < 1:
            raise ValueError("The high_water_mark must be a positive integer.")
        self.high_water_mark: Final = high_water_mark
        self.ended = False

        self._buffer: deque[Any] = deque()
        self._capacity_available = asyncio.Event()
        self._closed = False
        self._data_available = asyncio.Event()
        self._error: Optional[BaseException] = None
        self._finished = False
        self._pump: Optional[asyncio.Task] = None
        self._upstream: Optional[Transform] = None
        self._writing = asyncio.Lock()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, exc_type, exc_value, traceback):
        await self.aclose()

    def __aiter__(self) -> Self:
        return self

    async def __anext__(self) -> Any:
        if (result := await self._next()) is _END:
            raise StopAsyncIteration
        return result

    def __repr__(self):
        if self._error is not None:
            state = "failed"
        elif self._closed:
            state = "closed"
        elif self._finished:
            state = "finished"
        elif self.ended:
            state = "ending"
        else:
            state = "open"
        return (
            f"<{self.__class__.__name__} {state} buffered={len(self._buffer)}/"
            f"{self.high_water_mark}>"
        )

    # hooks

    @abstractmethod
    async def _transform(self, chunk: Any):
        """Processes a written chunk and pushes the resulting objects."""

    async def _flush(self):
        """Is called when the writing side is ended to push any remaining objects."""
        pass

    def _read(self):
        """Is called after an object was read from the buffer."""
        pass

    def _destroy(self):
        """Is called when the stage is closed or failed to release resources."""
        pass

    # flow control

    @property
    def error(self) -> Optional[BaseException]:
        """The exception that failed the stage, if any."""
        return self._error

    @property
    def has_capacity(self) -> bool:
        """Whether the output buffer holds less objects than the high water mark."""
        return len(self._buffer) < self.high_water_mark

    def _check_alive(self):
        if self._error is not None:
            raise self._error
        if self._closed:
            raise InvalidOperation("The stage has been closed.")

    def _check_writable(self):
        self._check_alive()
        if self.ended:
            raise InvalidOperation("The stage can't be written to after its end.")

    async def _next(self) -> Any:
        while True:
            if self._buffer:
                result = self._buffer.popleft()
                if self.has_capacity:
                    self._capacity_available.set()
                self._read()
                return result
            if self._error is not None:
                raise self._error
            if self._finished or self._closed:
                return _END
            self._data_available.clear()
            await self._data_available.wait()

    async def _run_hook(self, hook, *args):
        try:
            await hook(*args)
        except Exception as e:
            self.destroy(e)
            raise

    async def read(self) -> Any:
        """Returns the next object or :obj:`None` if the stage is exhausted."""
        if (result := await self._next()) is _END:
            return None
        return result

    def push(self, obj: Any) -> bool:
        """
        Adds an object to the output buffer.

        :return: Whether the buffer has capacity for more objects.
        """
        if self._closed:
            raise InvalidOperation("Can't push to a closed stage.")
        self._buffer.append(obj)
        self._data_available.set()
        return self.has_capacity

    async def wait_for_capacity(self):
        """Returns once the output buffer has capacity for more objects."""
        while not self.has_capacity and not self._closed:
            self._capacity_available.clear()
            await self._capacity_available.wait()
        self._check_alive()

    # writing side

    async def end(self, chunk: Optional[Any] = None):
        """
        Signals that no more chunks will be written, optionally after writing a last
        one.  Returns after the :meth:`_flush` hook, it doesn't wait for readers.
        """
        if chunk is not None:
            await self.write(chunk)
        self._check_writable()
        self.ended = True
        async with self._writing:
            self._check_alive()
            await self._run_hook(self._flush)
            self._finished = True
            self._data_available.set()

    async def write(self, chunk: Any):
        """
        Hands a chunk to the stage after waiting for capacity in the output buffer.
        Returns once the stage is ready to accept the next chunk.
        """
        self._check_writable()
        async with self._writing:
            self._check_writable()
            await self.wait_for_capacity()
            await self._run_hook(self._transform, chunk)

    async def pipe(
        self, source: InputSource, loader_config: Optional[SimpleNamespace] = None
    ):
        """
        Writes all chunks from a source to the stage and ends it.  See
        :func:`load_source` regarding possible sources.  A failure of the source
        fails the stage.
        """
        if isinstance(source, Transform):
            self._upstream = source

        try:
            chunks = load_source(source, loader_config)
            try:
                async for chunk in aiterate(chunks):
                    await self.write(chunk)
            finally:
                if chunks is not source:
                    await aclose(chunks)
        except Exception as e:
            self.destroy(e)
            raise

        await self.end()

    def pipe_in_background(
        self, source: InputSource, loader_config: Optional[SimpleNamespace] = None
    ) -> asyncio.Task:
        """
        Runs :meth:`pipe` as task.  Failures are delivered to the stage's readers.
        """
        if self._pump is not None:
            raise InvalidOperation("The stage is already fed from a source.")
        self._pump = asyncio.get_running_loop().create_task(
            self.__pump(source, loader_config)
        )
        return self._pump

    async def __pump(self, source: InputSource, loader_config):
        try:
            await self.pipe(source, loader_config)
        except Exception:
            logger.debug("Feeding %r from %r failed.", self, source, exc_info=True)

    # teardown

    async def aclose(self):
        """Closes the stage and waits for a background feeding task to terminate."""
        pump = self._pump
        self.destroy()
        if pump is not None and pump is not asyncio.current_task():
            await asyncio.gather(pump, return_exceptions=True)

    def destroy(self, error: Optional[BaseException] = None):
        """
        Closes the stage.  If an ``error`` is given, the stage fails with it, else
        buffered objects are discarded.  Stages that this one is fed from are closed
        as well.
        """
        if self._closed:
            return
        self._closed = True

        if error is None:
            if not self._finished:
                logger.debug("%r is closed prematurely.", self)
            self._buffer.clear()
        else:
            logger.debug("%r failed: %r", self, error)
            self._error = error

        if (
            (pump := self._pump) is not None
            and not pump.done()
            and pump is not asyncio.current_task()
        ):
            pump.cancel()

        self._destroy()
        self._capacity_available.set()
        self._data_available.set()

        if self._upstream is not None:
            self._upstream.destroy(error)


class XMLTransform(Transform):
    """
    A stage that consumes chunks of markup and produces event records.

    Records are forwarded as long as the output buffer has capacity; the remaining
    ones stay queued and are forwarded in order as soon as objects are read or
    before the next chunk is tokenized.  A chunk is only handed to the tokenizer
    when the output buffer has capacity and the tokenizer isn't saturated.

    Ending the stage doesn't wait for readers, a failure that is detected then but
    queued behind a full output buffer is only delivered to readers.

    :param options: A :class:`ParserOptions` instance, its fields can alternatively
                    be passed as keyword arguments.
    :param high_water_mark: The number of buffered records from which on no more
                            input is accepted.
    """

    def __init__(
        self,
        options: Optional[ParserOptions] = None,
        *,
        high_water_mark: int = DEFAULT_HIGH_WATER_MARK,
        **kwargs: Any,
    ):
        super().__init__(high_water_mark=high_water_mark)
        self.options: Final = make_options(options, kwargs)
        self.tokenizer: Final = plugin_manager.get_tokenizer(
            self.options.preferred_tokenizers
        )(self.options)
        self.queue: Final = EventQueue(self.options)
        self.queue.attach(self.tokenizer)

    def _destroy(self):
        self.queue.detach()

    def _forward_queued(self):
        if not self.has_capacity:
            return
        for event in self.queue.drain():
            if event[0] is NodeKind.Error:
                raise event[1]
            if not self.push(event):
                break

    async def _forward_all_queued(self):
        while self.queue:
            await self.wait_for_capacity()
            self._forward_queued()

    async def _flush(self):
        # what doesn't fit into the output buffer is forwarded while it's read
        self._forward_queued()
        self.tokenizer.end()
        self._forward_queued()

    def _read(self):
        if self.queue and not self._closed:
            try:
                self._forward_queued()
            except Exception as e:
                self.destroy(e)

    async def _transform(self, chunk: Chunk):
        await self._forward_all_queued()
        await self.wait_for_capacity()
        if not self.tokenizer.write(chunk):
            await self.tokenizer.drain()
        self._forward_queued()


class OpenTagAttributeParser(Transform):
    """
    A stage that consumes event records and produces them with the attributes of tag
    open records parsed into a mapping.
    """

    async def _transform(self, event: Event):
        self.push(parse_open_tag_attributes(event))


def pipeline(source: InputSource, *stages: Transform) -> Transform:
    """
    Feeds a source through a sequence of stages in background tasks and returns the
    last stage to read from.  Closing that stage closes all preceding ones.  Must be
    called with a running event loop.

    .. code-block:: python

        async with pipeline(path, XMLTransform(), OpenTagAttributeParser()) as events:
            async for event in events:
                ...
    """
    if not stages:
        raise ValueError("At least one stage is required.")

    upstream = source
    for stage in stages:
        stage.pipe_in_background(upstream)
        upstream = stage

    return stages[-1]


__all__ = (
    OpenTagAttributeParser.__name__,
    Transform.__name__,
    XMLTransform.__name__,
    pipeline.__name__,
)
