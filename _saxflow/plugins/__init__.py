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

from abc import ABC, abstractmethod
from collections import defaultdict
from collections.abc import Iterable, Sequence
from importlib.metadata import entry_points
from importlib.util import find_spec
from typing import TYPE_CHECKING

from _saxflow.events import NodeKind


if TYPE_CHECKING:
    from _saxflow.options import ParserOptions
    from _saxflow.typing import (
        Chunk,
        EventData,
        Listener,
        Loader,
        LoaderConstraint,
        SecondOrderDecorator,
    )


class PluginManager:
    __slots__ = ("loaders", "tokenizers")

    def __init__(self):
        self.loaders: list[Loader] = []
        self.tokenizers: dict[str, type[TokenizerInterface]] = {}

    def get_tokenizer(
        self, preferences: str | Sequence[str]
    ) -> type[TokenizerInterface]:
        if isinstance(preferences, str):
            preferences = (preferences,)

        for name in preferences:
            if (tokenizer := self.tokenizers.get(name)) is not None:
                return tokenizer

        for tokenizer in self.tokenizers.values():
            return tokenizer

        raise RuntimeError("No available tokenizers.")

    @staticmethod
    def load_plugins():
        """
        Loads all modules that are registered as entrypoint in the ``saxflow`` group and
        imports contributed extensions whose dependencies are available.
        """
        import _saxflow.plugins.builtin_tokenizer
        import _saxflow.plugins.core_loaders  # noqa: F401

        if find_spec("httpx"):
            import _saxflow.plugins.web_loader  # noqa: F401

        for entrypoint in entry_points().select(group="saxflow"):
            entrypoint.load()

    def register_loader(
        self, before: LoaderConstraint = None, after: LoaderConstraint = None
    ) -> SecondOrderDecorator:
        """
        Registers a source loader. Loaders are tried in order with the input source
        that a pull-driven bridge or :meth:`Transform.pipe` is called with and a
        :class:`types.SimpleNamespace` with configuration data. A loader either
        returns an iterable or asynchronous iterable of chunks or a string that
        explains why it didn't attempt to load the source.

        A module that is specified as ``saxflow`` plugin for an S3 loader might look
        like this:

        .. testcode::

            from _saxflow.plugins import plugin_manager
            from _saxflow.plugins.web_loader import web_loader


            @plugin_manager.register_loader(before=web_loader)
            def s3_loader(source, config):
                if isinstance(source, str) and source.startswith("s3://"):
                    config.source_url = source
                    return web_loader(
                        "https://s3.amazonaws.com/" + source[5:], config
                    )
                return "The input value is not an URL with the s3 scheme."
        """

        if before is not None and after is not None:
            raise NotImplementedError(
                "Loaders may only define one constraint atm. Please open an issue with "
                "a use-case description if you need to define both."
            )

        registered_loaders = self.loaders

        if before is not None:
            if not isinstance(before, Iterable):
                before = (before,)
            index = min(registered_loaders.index(x) for x in before)

        elif after is not None:
            if not isinstance(after, Iterable):
                after = (after,)
            index = max(registered_loaders.index(x) for x in after) + 1

        else:
            index = len(registered_loaders)

        def registrar(loader: Loader) -> Loader:
            assert callable(loader)
            registered_loaders.insert(index, loader)
            return loader

        return registrar


class TokenizerInterface(ABC):
    """
    This is the base class for markup tokenizers.  Tokenizers are fed with chunks of
    markup via :meth:`write` and emit events synchronously to the listeners that are
    registered with :meth:`on` while a chunk is processed.  Instances don't have to
    care about their state beyond the tokenizing of one input stream as they're only
    employed once.

    The listeners for a :attr:`NodeKind.TagOpen` event are called with a
    :class:`TagOpenData` instance, those for :attr:`NodeKind.TagClose` with a
    :class:`TagCloseData` and all other content kinds with a :class:`ContentData`
    instance.  :attr:`NodeKind.Error` listeners receive the exception that describes
    why the input can't be tokenized.  If there's no such listener, the exception is
    raised instead.

    :param options: The parsing options the tokenizer is employed with.
    """

    name: str
    """
    The tokenizer can be selected by this class attribute's value as (member of) a
    :attr:`ParserOptions.preferred_tokenizers` setting.
    """

    def __init_subclass__(cls):
        plugin_manager.tokenizers[cls.name] = cls

    def __init__(self, options: ParserOptions):
        self.listeners: defaultdict[NodeKind, list[Listener]] = defaultdict(list)
        self.options = options

    def emit(self, kind: NodeKind, data: EventData):
        listeners = self.listeners.get(kind)
        if not listeners:
            if kind is NodeKind.Error:
                if not isinstance(data, BaseException):
                    raise TypeError(
                        f"An error event must carry an exception, got {data!r}."
                    )
                raise data
            return
        for listener in tuple(listeners):
            listener(data)

    def on(self, kind: NodeKind, listener: Listener):
        self.listeners[kind].append(listener)

    def remove_all_listeners(self):
        self.listeners.clear()

    def remove_listener(self, kind: NodeKind, listener: Listener):
        if (listeners := self.listeners.get(kind)) is not None:
            listeners.remove(listener)

    @abstractmethod
    def write(self, data: Chunk) -> bool:
        """
        Tokenizes a chunk of markup and emits all events that can be determined
        completely.

        :return: Whether the tokenizer is ready to accept more input.  If not, the
                 caller is expected to await :meth:`drain` before writing again.
        """

    @abstractmethod
    async def drain(self):
        """Returns once the tokenizer is ready to accept more input."""

    @abstractmethod
    def end(self):
        """
        Processes any remaining input and emits the final events, an error is
        emitted if the input ended prematurely.
        """


plugin_manager = PluginManager()


__all__ = ("plugin_manager", TokenizerInterface.__name__)
