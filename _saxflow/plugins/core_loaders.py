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

"""
The ``core_loaders`` module provides a set of loaders that turn various input
sources into iterables of chunks.
"""

from __future__ import annotations

from asyncio import StreamReader
from collections.abc import AsyncIterable, Iterable
from io import IOBase
from pathlib import Path
from typing import TYPE_CHECKING, Any

from _saxflow.plugins import plugin_manager

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator
    from types import SimpleNamespace

    from _saxflow.typing import BinaryReader, Chunk, LoaderResult, TextReader


def _read_buffer(buffer: BinaryReader | TextReader, chunk_size: int) -> Iterator[Chunk]:
    while chunk := buffer.read(chunk_size):
        yield chunk


def _read_path(path: Path, chunk_size: int) -> Iterator[Chunk]:
    with path.open("rb") as file:
        yield from _read_buffer(file, chunk_size)


async def _read_stream(stream: StreamReader, chunk_size: int) -> AsyncIterator[Chunk]:
    while chunk := await stream.read(chunk_size):
        yield chunk


@plugin_manager.register_loader()
def path_loader(source: Any, config: SimpleNamespace) -> LoaderResult:
    """
    This loader reads from a file that is pointed at with a :class:`pathlib.Path`
    instance. The file's URI will be bound to ``source_url`` on the ``config``
    namespace.
    """
    if isinstance(source, Path):
        if not hasattr(config, "source_url"):
            config.source_url = (Path.cwd() / source).as_uri()
        return _read_path(source, config.chunk_size)
    return "The input value is not a pathlib.Path instance."


@plugin_manager.register_loader(after=path_loader)
def buffer_loader(source: Any, config: SimpleNamespace) -> LoaderResult:
    """
    This loader reads from a :term:`file-like object` that reads binary data or text
    or from an :class:`asyncio.StreamReader`.
    """
    if isinstance(source, StreamReader):
        return _read_stream(source, config.chunk_size)
    if isinstance(source, IOBase):
        if not hasattr(config, "source_url") and isinstance(
            name := getattr(source, "name", None), str
        ):
            if (path := Path.cwd() / name).is_file():
                config.source_url = path.as_uri()
        return _read_buffer(source, config.chunk_size)
    return "The input value is no buffer object."


@plugin_manager.register_loader(after=buffer_loader)
def text_loader(source: Any, config: SimpleNamespace) -> LoaderResult:
    """
    Uses a string or a byte sequence that contains a full document as only chunk.
    """
    if isinstance(source, (bytes, bytearray, memoryview, str)):
        return (source,)
    return "The input value is not a byte sequence or a string."


@plugin_manager.register_loader(after=text_loader)
def iterable_loader(source: Any, config: SimpleNamespace) -> LoaderResult:
    """
    Uses any iterable or asynchronous iterable as source of chunks, e.g. a
    generator.
    """
    if isinstance(source, (AsyncIterable, Iterable)):
        return source
    return "The input value is neither an iterable nor an asynchronous iterable."


__all__ = (
    buffer_loader.__name__,
    iterable_loader.__name__,
    path_loader.__name__,
    text_loader.__name__,
)
