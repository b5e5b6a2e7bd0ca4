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

import warnings
from collections.abc import Iterable, Sequence
from typing import Any, NamedTuple, Optional

from _saxflow.events import AVAILABLE_NODES, NodeKind
from _saxflow.exceptions import InvalidParserOptions


DEFAULT_TOKENIZER_HIGH_WATER_MARK = 16384


class ParserOptions(NamedTuple):
    """
    The configuration options that define which events are reported and how.

    :param include: The kind of events or an iterable of kinds to report. Kinds can
                    be given as :class:`NodeKind` members or their string values.
                    All kinds are reported by default.
    :param no_empty_text: Skip text events whose contents consist only of whitespace.
    :param report_self_closing: Append a boolean to tag open records that tells
                                whether the tag was self-closing.
    :param encoding: The encoding of byte input that neither declares one nor starts
                     with a Byte Order Mark. It doesn't affect data that is passed as
                     :class:`str`.
    :param tokenizer_high_water_mark: The length of a chunk from which on the
                                      tokenizer signals that it's saturated.
    :param preferred_tokenizers: The name or names of tokenizers to use in the order
                                 of preference.
    """

    include: NodeKind | str | Iterable[NodeKind | str] = AVAILABLE_NODES
    no_empty_text: bool = False
    report_self_closing: bool = False
    encoding: Optional[str] = None
    tokenizer_high_water_mark: int = DEFAULT_TOKENIZER_HIGH_WATER_MARK
    preferred_tokenizers: str | Sequence[str] = "builtin"

    def normalized_include(self) -> frozenset[NodeKind]:
        include = self.include
        if isinstance(include, str):
            include = (include,)

        result = set()
        for kind in include:
            try:
                kind = NodeKind(kind)
            except ValueError:
                raise InvalidParserOptions(
                    f"{kind!r} is not one of the available kinds: "
                    + ", ".join(str(k) for k in AVAILABLE_NODES)
                ) from None
            if kind is NodeKind.Error:
                raise InvalidParserOptions(
                    "Errors are always reported and can't be included explicitly."
                )
            result.add(kind)

        return frozenset(result)


def make_options(options: Optional[ParserOptions], kwargs: dict[str, Any]):
    """
    Returns a :class:`ParserOptions` instance for entry points that accept either an
    instance or its fields as keyword arguments.
    """
    if options is None:
        try:
            options = ParserOptions(**kwargs)
        except TypeError as e:
            raise InvalidParserOptions(str(e)) from None
    elif kwargs:
        raise InvalidParserOptions(
            "Options can either be passed as ParserOptions instance or as keyword "
            "arguments, not both."
        )
    elif not isinstance(options, ParserOptions):
        raise InvalidParserOptions(
            f"Expected a ParserOptions instance, got {options.__class__.__name__}."
        )

    if options.tokenizer_high_water_mark < 1:
        raise InvalidParserOptions(
            "The tokenizer_high_water_mark must be a positive integer."
        )

    if (
        options.report_self_closing
        and NodeKind.TagOpen not in options.normalized_include()
    ):
        warnings.warn(
            "The report_self_closing option has no effect when tag open events "
            "aren't included.",
            category=UserWarning,
            stacklevel=3,
        )

    return options


__all__ = (ParserOptions.__name__,)
