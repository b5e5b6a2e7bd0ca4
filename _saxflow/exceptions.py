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

"""These are the specific saxflow exceptions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from _saxflow.typing import Loader


class SaxflowBaseException(Exception):
    pass


class FailedSourceLoading(SaxflowBaseException):
    def __init__(self, source: Any, excuses: dict[Loader, str | Exception]):
        self.source = source
        self.excuses = excuses

    def __str__(self):
        return f"Couldn't load {self.source!r} with these loaders: {self.excuses}"


class InvalidOperation(SaxflowBaseException):
    """
    Raised when an invalid operation is attempted by the client code, e.g. writing
    to a stage that has already been ended.
    """

    pass


class InvalidParserOptions(SaxflowBaseException, ValueError):
    """Raised when parser options contain values that can't be used."""

    pass


class ParsingError(SaxflowBaseException):
    pass


class MalformedAttributesError(ParsingError):
    """Raised when a raw attribute string can't be split into names and values."""

    def __init__(self, attributes: str, position: int):
        self.attributes = attributes
        self.position = position

    def __str__(self):
        return (
            f"Malformed attributes at character {self.position}: "
            f"`{self.attributes[self.position:self.position + 16]}`"
        )


class MalformedMarkupError(ParsingError):
    """
    Raised by a tokenizer when the markup can't be tokenized. ``position`` is the
    offset of the offending construct in the decoded character stream.
    """

    def __init__(
        self,
        message: str,
        position: Optional[int] = None,
        snippet: Optional[str] = None,
    ):
        self.message = message
        self.position = position
        self.snippet = snippet

    def __str__(self):
        if self.position is None:
            return self.message

        snippet = self.snippet
        if snippet:
            if len(snippet) > 16:
                snippet = f"`{snippet[:16]}…`"
            else:
                snippet = f"`{snippet}`"
            return (
                f"Malformed markup at character {self.position} ({snippet}): "
                f"{self.message}"
            )
        else:
            return f"Malformed markup at character {self.position}: {self.message}"


__all__ = (
    FailedSourceLoading.__name__,
    InvalidOperation.__name__,
    InvalidParserOptions.__name__,
    MalformedAttributesError.__name__,
    MalformedMarkupError.__name__,
    ParsingError.__name__,
    SaxflowBaseException.__name__,
)
