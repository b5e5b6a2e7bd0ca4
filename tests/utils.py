import asyncio
from collections.abc import AsyncIterable

from saxflow import XMLTransform, pipeline, stream_events


def chunked(data, size: int) -> list:
    return [data[i : i + size] for i in range(0, len(data), size)]


async def collect(events: AsyncIterable) -> list:
    return [event async for event in events]


def generated_events(source, **kwargs) -> list:
    """Collects the records that the pull-driven bridge yields for a source."""
    return asyncio.run(collect(stream_events(source, **kwargs)))


def transformed_events(source, *, high_water_mark: int = 16, **kwargs) -> list:
    """Collects the records that a flow-controlled bridge produces for a source."""

    async def main():
        transform = XMLTransform(high_water_mark=high_water_mark, **kwargs)
        async with pipeline(source, transform) as events:
            return await collect(events)

    return asyncio.run(main())
