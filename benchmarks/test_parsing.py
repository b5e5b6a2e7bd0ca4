import asyncio

import pytest

from saxflow import (
    XMLTransform,
    iterate_open_tag_attributes,
    parse_events,
    pipeline,
    stream_events,
)

from benchmarks.conftest import SAMPLE_DOCUMENT


pytest.importorskip("pytest_benchmark")


SAMPLE_BYTES = SAMPLE_DOCUMENT.encode()
CHUNKS = [SAMPLE_BYTES[i : i + 4096] for i in range(0, len(SAMPLE_BYTES), 4096)]


def consume_synchronously(options):
    for _ in iterate_open_tag_attributes(parse_events(CHUNKS, **options)):
        pass


async def generate(options):
    async for _ in stream_events(CHUNKS, **options):
        pass


async def transform(high_water_mark, options):
    async for _ in pipeline(
        CHUNKS, XMLTransform(high_water_mark=high_water_mark, **options)
    ):
        pass


@pytest.mark.parametrize(
    "options", ({}, {"include": ("tagopen", "tagclose"), "no_empty_text": True})
)
def test_parse_events(benchmark, options):
    benchmark(consume_synchronously, options)


@pytest.mark.parametrize(
    "options", ({}, {"include": ("tagopen", "tagclose"), "no_empty_text": True})
)
def test_stream_events(benchmark, options):
    benchmark(lambda: asyncio.run(generate(options)))


@pytest.mark.parametrize("high_water_mark", (1, 16, 1024))
def test_xml_transform(benchmark, high_water_mark):
    benchmark(lambda: asyncio.run(transform(high_water_mark, {})))
