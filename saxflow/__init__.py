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
``saxflow`` turns the events of an incremental markup tokenizer into event records
that are consumed either from a flow-controlled :class:`XMLTransform` stage or
lazily from the asynchronous generator :func:`stream_events`.
"""

from __future__ import annotations

from _saxflow.attributes import (
    parse_attributes,
    parse_entities,
    parse_open_tag_attributes,
)
from _saxflow.events import (
    AVAILABLE_NODES,
    ContentData,
    NodeKind,
    TagCloseData,
    TagOpenData,
)
from _saxflow.generator import (
    iterate_open_tag_attributes,
    map_open_tag_attributes,
    parse_events,
    stream_events,
)
from _saxflow.options import ParserOptions
from _saxflow.plugins import plugin_manager as _plugin_manager
from _saxflow.queue import EventQueue
from _saxflow.sources import load_source
from _saxflow.transform import (
    OpenTagAttributeParser,
    Transform,
    XMLTransform,
    pipeline,
)


# plugin loading


_plugin_manager.load_plugins()


__all__ = (
    "AVAILABLE_NODES",
    ContentData.__name__,
    EventQueue.__name__,
    NodeKind.__name__,
    OpenTagAttributeParser.__name__,
    ParserOptions.__name__,
    TagCloseData.__name__,
    TagOpenData.__name__,
    Transform.__name__,
    XMLTransform.__name__,
    iterate_open_tag_attributes.__name__,
    load_source.__name__,
    map_open_tag_attributes.__name__,
    parse_attributes.__name__,
    parse_entities.__name__,
    parse_events.__name__,
    parse_open_tag_attributes.__name__,
    pipeline.__name__,
    stream_events.__name__,
)
