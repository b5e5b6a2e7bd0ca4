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

from enum import Enum
from typing import TYPE_CHECKING, NamedTuple

if TYPE_CHECKING:
    from typing import Final


class NodeKind(str, Enum):
    """
    The kinds of events that a tokenizer emits and that are queued as the first
    member of an event record. As the members are strings, records can be compared
    to tuples that spell the kind as plain string, e.g. ``("tagclose", "a")``.
    """

    TagOpen = "tagopen"
    TagClose = "tagclose"
    Text = "text"
    CData = "cdata"
    Comment = "comment"
    ProcessingInstruction = "processinginstruction"
    # only used to transport failures through the event queue
    Error = "error"

    def __str__(self):
        return self.value


AVAILABLE_NODES: Final = (
    NodeKind.TagOpen,
    NodeKind.TagClose,
    NodeKind.Text,
    NodeKind.CData,
    NodeKind.Comment,
    NodeKind.ProcessingInstruction,
)


class TagOpenData(NamedTuple):
    name: str
    attributes: str
    is_self_closing: bool


class TagCloseData(NamedTuple):
    name: str


class ContentData(NamedTuple):
    contents: str


__all__ = (
    "AVAILABLE_NODES",
    ContentData.__name__,
    NodeKind.__name__,
    TagCloseData.__name__,
    TagOpenData.__name__,
)
