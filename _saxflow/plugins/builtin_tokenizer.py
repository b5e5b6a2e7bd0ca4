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
The builtin tokenizer is an incremental, non-validating tokenizer that reports tags
with their unparsed attributes.  Text is reported verbatim, entities aren't decoded
and text nodes are never split at chunk boundaries.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import TYPE_CHECKING, Final, Optional

from _saxflow.events import ContentData, NodeKind, TagCloseData, TagOpenData
from _saxflow.exceptions import InvalidOperation, MalformedMarkupError
from _saxflow.plugins import TokenizerInterface
from _saxflow.utils import IncrementalDecoder


if TYPE_CHECKING:
    from _saxflow.options import ParserOptions
    from _saxflow.typing import Chunk


logger = logging.getLogger(__name__)


DECLARATION_PREFIXES: Final = ("<!--", "<![CDATA[", "<!DOCTYPE")
LONGEST_DECLARATION_PREFIX: Final = max(len(p) for p in DECLARATION_PREFIXES)

# a tag's body up to and including the closing angle bracket, quoted attribute
# values may contain angle brackets
match_tag_body: Final = re.compile(r"""(?:[^>"']|"[^"]*"|'[^']*')*>""").match
match_doctype: Final = re.compile(
    r"""<!DOCTYPE(?:[^\[>"']|"[^"]*"|'[^']*'|\[(?:[^\]"']|"[^"]*"|'[^']*')*\])*>"""
).match
match_tag_name: Final = re.compile(r"[^\s/>]+").match


class BuiltinTokenizer(TokenizerInterface):
    name = "builtin"

    def __init__(self, options: ParserOptions):
        super().__init__(options)
        self.buffer = ""
        self.decoder = IncrementalDecoder(options.encoding)
        self.ended = False
        self.failed = False
        self.offset = 0
        self.saturated = False
        self.tag_stack: list[str] = []

    async def drain(self):
        if self.saturated:
            await asyncio.sleep(0)
            self.saturated = False

    def end(self):
        if self.ended:
            return
        self.ended = True

        if self.failed:
            return

        if self.decode(b"", final=True):
            self.tokenize(final=True)

        if self.failed:
            return

        if self.buffer:
            self.fail(
                "The input ended within a markup construct.", 0, self.buffer[:16]
            )
        elif self.tag_stack:
            self.fail(
                "The input ended with unclosed tags: "
                + ", ".join(f"<{n}>" for n in self.tag_stack)
            )

    def fail(
        self, message: str, position: Optional[int] = None, snippet: str = ""
    ):
        self.failed = True
        if position is not None:
            position += self.offset
        error = MalformedMarkupError(message, position, snippet)
        logger.debug("Tokenizing failed: %s", error)
        self.emit(NodeKind.Error, error)

    def decode(self, data: Chunk, final: bool = False) -> bool:
        if isinstance(data, str):
            self.buffer += data
            return True

        try:
            self.buffer += self.decoder.decode(bytes(data), final)
        except (LookupError, UnicodeDecodeError) as e:
            self.fail(f"The input can't be decoded: {e}", len(self.buffer))
            return False
        return True

    def tokenize(self, final: bool):
        buffer = self.buffer
        length = len(buffer)
        position = 0

        while position < length and not self.failed:
            if buffer[position] != "<":
                end = buffer.find("<", position)
                if end == -1:
                    if not final:
                        break
                    end = length
                self.emit(NodeKind.Text, ContentData(buffer[position:end]))
                position = end
                continue

            end = self.tokenize_markup(buffer, position)
            if end is None:
                break
            position = end

        self.offset += position
        self.buffer = buffer[position:]

    def tokenize_markup(self, buffer: str, position: int) -> Optional[int]:
        """
        Emits the event for the markup construct at ``position`` and returns the
        position after it.  :obj:`None` is returned if the construct isn't complete
        yet or malformed.
        """

        if buffer.startswith("<!", position):
            return self.tokenize_declaration(buffer, position)

        if buffer.startswith("<?", position):
            if (end := buffer.find("?>", position + 2)) == -1:
                return None
            self.emit(
                NodeKind.ProcessingInstruction,
                ContentData(buffer[position + 2 : end]),
            )
            return end + 2

        if buffer.startswith("</", position):
            if (end := buffer.find(">", position + 2)) == -1:
                return None
            return self.tokenize_tag_close(buffer, position, end)

        if (match := match_tag_body(buffer, position + 1)) is None:
            return None
        return self.tokenize_tag_open(buffer, position, match.end())

    def tokenize_declaration(self, buffer: str, position: int) -> Optional[int]:
        if buffer.startswith("<!--", position):
            if (end := buffer.find("-->", position + 4)) == -1:
                return None
            self.emit(NodeKind.Comment, ContentData(buffer[position + 4 : end]))
            return end + 3

        if buffer.startswith("<![CDATA[", position):
            if (end := buffer.find("]]>", position + 9)) == -1:
                return None
            self.emit(NodeKind.CData, ContentData(buffer[position + 9 : end]))
            return end + 3

        if buffer.startswith("<!DOCTYPE", position):
            if (match := match_doctype(buffer, position)) is None:
                return None
            return match.end()

        head = buffer[position : position + LONGEST_DECLARATION_PREFIX]
        if len(head) < LONGEST_DECLARATION_PREFIX and any(
            p.startswith(head) for p in DECLARATION_PREFIXES
        ):
            return None

        self.fail("Unrecognized sequence.", position, head)
        return None

    def tokenize_tag_close(self, buffer: str, position: int, end: int) -> Optional[int]:
        name = buffer[position + 2 : end].strip()
        if not name:
            self.fail("Tag name expected.", position, buffer[position : end + 1])
            return None

        tag_stack = self.tag_stack
        if not tag_stack:
            self.fail(f"Unexpected closing tag </{name}>.", position, name)
            return None
        if tag_stack[-1] != name:
            self.fail(
                f"Unclosed tag <{tag_stack[-1]}>, found </{name}> instead.",
                position,
                name,
            )
            return None

        tag_stack.pop()
        self.emit(NodeKind.TagClose, TagCloseData(name))
        return end + 1

    def tokenize_tag_open(self, buffer: str, position: int, end: int) -> Optional[int]:
        # end is the position after the closing angle bracket
        if (match := match_tag_name(buffer, position + 1, end - 1)) is None:
            self.fail("Tag name expected.", position, buffer[position:end])
            return None

        name = match.group()
        attributes = buffer[match.end() : end - 1]
        if is_self_closing := attributes.endswith("/"):
            attributes = attributes[:-1]
        else:
            self.tag_stack.append(name)

        self.emit(NodeKind.TagOpen, TagOpenData(name, attributes, is_self_closing))
        return end

    def write(self, data: Chunk) -> bool:
        if self.ended:
            raise InvalidOperation("The tokenizer can't be written to after its end.")

        if not self.failed and self.decode(data):
            self.tokenize(final=False)

        if len(data) >= self.options.tokenizer_high_water_mark:
            logger.debug("Tokenizer is saturated by a chunk of %i.", len(data))
            self.saturated = True

        return not self.saturated


__all__ = (BuiltinTokenizer.__name__,)
