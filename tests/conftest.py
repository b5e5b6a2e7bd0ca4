import pytest

# keep this before imports from saxflow!
from tests import plugins  # noqa: F401

from _saxflow.plugins import plugin_manager


SAMPLE_XML = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    "<head>\n"
    "<!-- this is a comment -->\n"
    "<title>XML Test File</title>\n"
    "<selfclose />\n"
    "<cdata-section><![CDATA[this is a c&data s<>ction]]></cdata-section>\n"
    "<empty></empty>\n"
    '<hasattrs first="one" second="two"  third="three " />\n'
    "<textarea> this\nis\na\r\n\ttextual\ncontent  </textarea>\n"
    '<other attr="value"></other>\n'
    "</head>\n"
)

SAMPLE_EVENTS = [
    ("processinginstruction", 'xml version="1.0" encoding="UTF-8"'),
    ("text", "\n"),
    ("tagopen", "head", ""),
    ("text", "\n"),
    ("comment", " this is a comment "),
    ("text", "\n"),
    ("tagopen", "title", ""),
    ("text", "XML Test File"),
    ("tagclose", "title"),
    ("text", "\n"),
    ("tagopen", "selfclose", " "),
    ("tagclose", "selfclose"),
    ("text", "\n"),
    ("tagopen", "cdata-section", ""),
    ("cdata", "this is a c&data s<>ction"),
    ("tagclose", "cdata-section"),
    ("text", "\n"),
    ("tagopen", "empty", ""),
    ("tagclose", "empty"),
    ("text", "\n"),
    ("tagopen", "hasattrs", ' first="one" second="two"  third="three " '),
    ("tagclose", "hasattrs"),
    ("text", "\n"),
    ("tagopen", "textarea", ""),
    ("text", " this\nis\na\r\n\ttextual\ncontent  "),
    ("tagclose", "textarea"),
    ("text", "\n"),
    ("tagopen", "other", ' attr="value"'),
    ("tagclose", "other"),
    ("text", "\n"),
    ("tagclose", "head"),
    ("text", "\n"),
]

SELF_CLOSING_XML = "<outer>\n<selfclose />\n</outer>"


@pytest.fixture
def sample_xml():
    return SAMPLE_XML


@pytest.fixture
def sample_events():
    return list(SAMPLE_EVENTS)


@pytest.fixture
def restore_loaders():
    loaders = list(plugin_manager.loaders)
    yield
    plugin_manager.loaders[:] = loaders


@pytest.fixture
def restore_tokenizers():
    tokenizers = dict(plugin_manager.tokenizers)
    yield
    plugin_manager.tokenizers.clear()
    plugin_manager.tokenizers.update(tokenizers)
