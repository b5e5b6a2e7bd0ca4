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

import codecs
import re
from collections.abc import AsyncIterable, Iterable
from typing import TYPE_CHECKING, Final, Optional

from _saxflow.exceptions import InvalidOperation

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator
    from typing import Any, TypeVar

    T = TypeVar("T")


BOM_TO_ENCODING_NAME: Final = (
    (4, codecs.BOM_UTF32_LE, "utf-32-le"),
    (4, codecs.BOM_UTF32_BE, "utf-32-be"),
    (3, codecs.BOM_UTF8, "utf-8"),
    (2, codecs.BOM_UTF16_LE, "utf-16-le"),
    (2, codecs.BOM_UTF16_BE, "utf-16-be"),
)
ENCODING_DETECTION_SIZE: Final = 64


match_encoding: Final = re.compile(
    rb"<\?xml\s+version=[\"']1\.[0-9]+[\"']\s+"
    rb"encoding=[\"']([A-Za-z][A-Za-z0-9._-]*)[\"']"
).match


def detect_encoding(head: bytes) -> str | None:
    if (match := match_encoding(head)) is not None:
        return match.group(1).decode("ascii")
    else:
        for bom_size, bom, name in BOM_TO_ENCODING_NAME:
            if head[:bom_size] == bom:
                return name
        else:
            return None


class IncrementalDecoder:
    """
    Decodes a stream of byte chunks.  Unless an encoding is given, the first bytes
    are held back until enough data is available to detect an encoding from an XML
    declaration or a Byte Order Mark.  UTF-8 is assumed if neither is found.
    """

    __slots__ = ("decoder", "encoding", "head")

    def __init__(self, encoding: Optional[str] = None):
        self.encoding = encoding
        self.decoder: Optional[codecs.IncrementalDecoder] = None
        self.head = b""

    def decode(self, data: bytes, final: bool = False) -> str:
        if self.decoder is not None:
            return self.decoder.decode(data, final)

        self.head += data
        if (
            self.encoding is None
            and not final
            and len(self.head) < ENCODING_DETECTION_SIZE
        ):
            return ""

        encoding = self.encoding or detect_encoding(self.head) or "utf-8"
        self.decoder = codecs.getincrementaldecoder(encoding)()
        data, self.head = self.head, b""
        result = self.decoder.decode(data, final)
        if result.startswith("\ufeff"):
            result = result[1:]
        return result


async def aiterate(iterable: Iterable[T] | AsyncIterable[T]) -> AsyncIterator[T]:
    """Iterates asynchronously over a synchronous or an asynchronous iterable."""
    if isinstance(iterable, AsyncIterable):
        async for item in iterable:
            yield item
    else:
        for item in iterable:
            yield item


async def aclose(iterator: Any):
    """Closes a generator or an asynchronous generator."""
    if (close := getattr(iterator, "aclose", None)) is not None:
        await close()
    elif (close := getattr(iterator, "close", None)) is not None:
        close()


def iterate(iterable: Iterable[T] | AsyncIterable[T] | Any) -> Iterator[T]:
    if isinstance(iterable, AsyncIterable):
        raise InvalidOperation(
            "An asynchronous iterable can't be consumed synchronously, use the "
            "asynchronous interface instead."
        )
    yield from iterable


__all__ = (detect_encoding.__name__,)
