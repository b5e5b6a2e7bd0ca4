import gc

import pytest


SAMPLE_DOCUMENT = (
    '<?xml version="1.0" encoding="UTF-8"?>\n<corpus>\n'
    + "".join(
        f'  <entry n="{i}" type="sample">\n'
        f"    <!-- entry {i} -->\n"
        f"    <title>Entry &amp; number {i}</title>\n"
        f"    <text><![CDATA[raw <data> {i}]]> and some text.</text>\n"
        f'    <ref target="#e{i + 1}"/>\n'
        "  </entry>\n"
        for i in range(2000)
    )
    + "</corpus>\n"
)


@pytest.fixture(autouse=True)
def _collect_garbage():
    gc.collect()
    gc.collect()
