import os
import sys
import xml.etree.ElementTree as ET
from pathlib import Path

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'canopy', and conftest helpers importable from subdirectories
for p in (SRC_ROOT, TESTS_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))

from canopy.core.config import EngineConfig
from canopy.core.utils.logging_setup import reset_logging_for_tests


@pytest.fixture(autouse=True)
def _isolate_canopy_state(monkeypatch):
    """Tests must be deterministic regardless of the developer's CANOPY_* env."""
    for key in list(os.environ):
        if key.startswith("CANOPY_"):
            monkeypatch.delenv(key, raising=False)
    reset_logging_for_tests()
    yield
    reset_logging_for_tests()


@pytest.fixture
def config() -> EngineConfig:
    """Bundled defaults only."""
    return EngineConfig.from_mapping({})


@pytest.fixture
def doc() -> ET.ElementTree:
    """A small article: two paragraphs, a heading, and an untouched footer."""
    return ET.ElementTree(
        ET.fromstring(
            "<html>"
            "<body>"
            "<h1>Title</h1>"
            "<p id='short'>Hi.</p>"
            "<p id='long'>A much longer paragraph of actual prose.</p>"
            "<footer>fine print</footer>"
            "</body>"
            "</html>"
        )
    )


def find(doc: ET.ElementTree, tag: str, id_: str | None = None) -> ET.Element:
    """Return the first element with ``tag`` (and ``id``, if given)."""
    for el in doc.getroot().iter(tag):
        if id_ is None or el.get("id") == id_:
            return el
    raise LookupError(f"no <{tag} id={id_!r}> in test document")
