import base64
import json
import sys
from pathlib import Path

import pytest


ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
if SRC.exists():
    sys.path.insert(0, str(SRC))

from skill_sorter.catalog import FULL_CATALOG  # noqa: E402
from skill_sorter.deck import make_rng  # noqa: E402
from skill_sorter.scheduling import ManualScheduler  # noqa: E402


@pytest.fixture(scope="session")
def project_root() -> Path:
    return ROOT


@pytest.fixture()
def catalog():
    return FULL_CATALOG


@pytest.fixture()
def pair_catalog():
    by_name = {s.name: s for s in FULL_CATALOG}
    return (by_name["Connector"], by_name["Deep Diver"])


@pytest.fixture()
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture()
def rng():
    return make_rng(1234)


@pytest.fixture()
def raw_token():
    """Token for an arbitrary record, bypassing the encoder."""

    def make(record) -> str:
        text = json.dumps(record)
        return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii").rstrip("=")

    return make
