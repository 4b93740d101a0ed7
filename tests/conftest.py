# pylint:disable=redefined-outer-name
import os
from unittest import mock

import pytest


@pytest.fixture
def proc(tmp_path):
    proc = tmp_path / 'proc'
    proc.mkdir()
    yield proc


@pytest.fixture(autouse=True)
def no_global_config():
    """keep the developer's own ~/.envgrep.yaml out of the tests"""
    with mock.patch.dict(os.environ, {'ENVGREP_NO_GLOBAL_CONFIG': 'true'}):
        yield
