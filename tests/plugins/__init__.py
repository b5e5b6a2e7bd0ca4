from __future__ import annotations

from _saxflow.plugins.builtin_tokenizer import BuiltinTokenizer


class RecordingTokenizer(BuiltinTokenizer):
    """Records whether it was saturated when it got written to or drained."""

    name = "recording"

    def __init__(self, options):
        super().__init__(options)
        self.calls: list[tuple[str, bool]] = []

    async def drain(self):
        self.calls.append(("drain", self.saturated))
        await super().drain()

    def write(self, data):
        self.calls.append(("write", self.saturated))
        return super().write(data)
