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
from typing import TYPE_CHECKING, Final

from _saxflow.events import NodeKind
from _saxflow.exceptions import MalformedAttributesError
from _saxflow.queue import is_whitespace

if TYPE_CHECKING:
    from re import Match

    from _saxflow.typing import Event


PREDEFINED_ENTITIES: Final = {
    "amp": "&",
    "apos": "'",
    "gt": ">",
    "lt": "<",
    "quot": '"',
}


match_attribute: Final = re.compile(
    r"""(?P<name>[^\s=/"'<>]+)\s*=\s*(?:"(?P<double>[^"]*)"|'(?P<single>[^']*)')"""
).match
match_whitespace: Final = re.compile(r"\s*").match
substitute_entities: Final = re.compile(
    r"&(?:#x(?P<hex>[0-9A-Fa-f]+)|#(?P<dec>[0-9]+)|(?P<name>[A-Za-z]+));"
).sub


def _replace_entity(match: Match) -> str:
    if (name := match.group("name")) is not None:
        return PREDEFINED_ENTITIES.get(name, match.group())

    if (hexadecimal := match.group("hex")) is not None:
        code_point = int(hexadecimal, 16)
    else:
        code_point = int(match.group("dec"))

    if code_point > 0x10FFFF:
        return match.group()
    return chr(code_point)


def parse_entities(text: str) -> str:
    """
    Replaces the predefined XML entities and character references in a string.
    Unknown references are left untouched.

    >>> parse_entities("&quot;Run!&quot;, he said")
    '"Run!", he said'
    """
    if "&" not in text:
        return text
    return substitute_entities(_replace_entity, text)


def parse_attributes(attributes: str) -> dict[str, str]:
    """
    Parses the unparsed attributes of a tag open event into a mapping of attribute
    names to values.  Entities in values are decoded.

    :param attributes: The attributes' string as found between a tag's name and the
                       end of the tag.
    :return: A mapping that is empty if the string contains only whitespace.

    >>> parse_attributes(' first="one" second="two"  third="three " ')
    {'first': 'one', 'second': 'two', 'third': 'three '}
    """
    result: dict[str, str] = {}
    length = len(attributes)
    position = match_whitespace(attributes).end()

    while position < length:
        if (match := match_attribute(attributes, position)) is None:
            raise MalformedAttributesError(attributes, position)

        value = match.group("double")
        if value is None:
            value = match.group("single")
        result[match.group("name")] = parse_entities(value)

        position = match_whitespace(attributes, match.end()).end()

    return result


def parse_open_tag_attributes(event: Event) -> Event:
    """
    Returns a tag open record with the attributes as mapping in place of the
    unparsed string.  Other records are returned as they are.
    """
    if (
        len(event) > 2
        and event[0] == NodeKind.TagOpen
        and isinstance(attributes := event[2], str)
    ):
        if is_whitespace(attributes):
            return (*event[:2], {}, *event[3:])
        return (*event[:2], parse_attributes(attributes), *event[3:])
    return event


__all__ = (
    parse_attributes.__name__,
    parse_entities.__name__,
    parse_open_tag_attributes.__name__,
)
