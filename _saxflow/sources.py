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

from types import SimpleNamespace
from typing import TYPE_CHECKING, Final, Optional

from _saxflow.exceptions import FailedSourceLoading
from _saxflow.plugins import plugin_manager

if TYPE_CHECKING:
    from _saxflow.typing import ChunkSource, InputSource, Loader


DEFAULT_CHUNK_SIZE: Final = 64 * 1024


def load_source(
    source: InputSource, config: Optional[SimpleNamespace] = None
) -> ChunkSource:
    """
    Turns an input source into an iterable or asynchronous iterable of chunks by
    trying the registered loaders in their order.

    :param source: Anything that a registered loader can handle.
    :param config: A namespace with configuration data for the loaders, it's
                   populated with defaults for missing values. Loaders may also
                   store information about the source there, e.g. ``source_url``.
    :return: The iterable that the first successful loader returned.
    """
    if config is None:
        config = SimpleNamespace()
    if not hasattr(config, "chunk_size"):
        config.chunk_size = DEFAULT_CHUNK_SIZE

    loader_excuses: dict[Loader, str | Exception] = {}

    for loader in plugin_manager.loaders:
        try:
            loader_result = loader(source, config)
        except Exception as e:
            loader_excuses[loader] = e
        else:
            if isinstance(loader_result, str):
                loader_excuses[loader] = loader_result
            else:
                return loader_result

    vars(config).pop("source_url", None)
    raise FailedSourceLoading(source, loader_excuses)


__all__ = (load_source.__name__,)
