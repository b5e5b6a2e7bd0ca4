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

import sys
from collections.abc import AsyncIterable, Callable, Iterable
from typing import TYPE_CHECKING, Any, Optional, Protocol, TypeAlias

if TYPE_CHECKING:
    from types import SimpleNamespace

    from _saxflow.events import ContentData, TagCloseData, TagOpenData


if sys.version_info < (3, 11):  # DROPWITH Python 3.10
    from typing_extensions import Self
else:
    from typing import Self


class BinaryReader(Protocol):
    def read(self, n: int = -1) -> bytes: ...


class TextReader(Protocol):
    def read(self, n: int = -1) -> str: ...


Chunk: TypeAlias = "bytes | bytearray | memoryview | str"
ChunkSource: TypeAlias = "Iterable[Chunk] | AsyncIterable[Chunk]"

Event: TypeAlias = "tuple[Any, ...]"
EventRecords: TypeAlias = "Iterable[Event] | AsyncIterable[Event]"

EventData: TypeAlias = "TagOpenData | TagCloseData | ContentData | BaseException"
Listener: TypeAlias = "Callable[[Any], None]"

InputSource: TypeAlias = "bytes | str | BinaryReader | TextReader | ChunkSource | Any"
LoaderResult: TypeAlias = "ChunkSource | str"
Loader: TypeAlias = "Callable[[Any, SimpleNamespace], LoaderResult]"
LoaderConstraint: TypeAlias = "Optional[Loader | Iterable[Loader]]"
SecondOrderDecorator: TypeAlias = "Callable[[Loader], Loader]"


__all__ = (
    "BinaryReader",
    "Chunk",
    "ChunkSource",
    "Event",
    "EventData",
    "EventRecords",
    "InputSource",
    "Listener",
    "Loader",
    "LoaderConstraint",
    "LoaderResult",
    "Self",
    "TextReader",
)
