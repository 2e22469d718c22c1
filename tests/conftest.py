import os

import pytest

from tests.utils import make_config


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    # Make sure settings coming from the environment of the test runner do not leak in
    for name in list(os.environ):
        if name.startswith("COVERBAND_") or name == "DYNO":
            monkeypatch.delenv(name)
    yield


@pytest.fixture
def config():
    return make_config()
