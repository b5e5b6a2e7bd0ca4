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
If ``saxflow`` is installed with ``web-loader`` as extra, the required
dependencies for this loader are installed as well.
"""


from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from _saxflow.plugins import plugin_manager
from _saxflow.plugins.core_loaders import text_loader

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from types import SimpleNamespace

    from _saxflow.typing import LoaderResult


try:
    import h2  # type: ignore
except ImportError:
    http2 = False
else:
    http2 = True
    del h2


logger = logging.getLogger(__name__)


async def _stream_response(
    client: httpx.AsyncClient, url: str, chunk_size: int
) -> AsyncIterator[bytes]:
    async with client.stream("GET", url) as response:
        response.raise_for_status()
        logger.debug("Streaming %s (%s).", url, response.http_version)
        async for chunk in response.aiter_bytes(chunk_size=chunk_size):
            yield chunk


async def _stream_url(url: str, config: SimpleNamespace) -> AsyncIterator[bytes]:
    client = getattr(config, "http_client", None)
    if client is None:
        async with httpx.AsyncClient(follow_redirects=True, http2=http2) as client:
            async for chunk in _stream_response(client, url, config.chunk_size):
                yield chunk
    else:
        async for chunk in _stream_response(client, url, config.chunk_size):
            yield chunk


@plugin_manager.register_loader(before=text_loader)
def web_loader(source: Any, config: SimpleNamespace) -> LoaderResult:
    """
    This loader streams a document from a URL with the ``http`` and ``https`` scheme.
    Unless an :class:`httpx.AsyncClient` is bound to ``http_client`` on the ``config``
    namespace, a client that follows redirects and can partially be configured with
    `environment variables`_ is used for each request. The URL will be bound to the
    name ``source_url`` on the ``config`` namespace.

    As the response is streamed asynchronously, this loader can't be used with
    :func:`parse_events`.

    .. _environment variables: https://www.python-httpx.org/environment_variables/
    """

    if isinstance(source, str) and source.lower().startswith(("http://", "https://")):
        config.source_url = source
        return _stream_url(source, config)
    return "The input value is not an URL with the http or https scheme."


__all__ = (web_loader.__name__,)
