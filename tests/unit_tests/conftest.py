"""Test setup."""
import os

import pytest
from prometheus_client import CollectorRegistry

import classrepo_plug as plug
from classrepo_plug.testhelpers import fakeapi

import _classrepo.constants
from _classrepo.provisioning import JSONRecordStore, StatsRecorder

import constants

EXPECTED_ENV_VARIABLES = [_classrepo.constants.TOKEN_ENV]


@pytest.fixture(autouse=True)
def unset_environ():
    """Remove any environment variables set by the user, to avoid
    accidentally reading them in a test.
    """
    saved = {
        var: os.environ.pop(var)
        for var in EXPECTED_ENV_VARIABLES
        if var in os.environ
    }
    yield
    os.environ.update(saved)


@pytest.fixture
def api():
    return fakeapi.FakeAPI(
        base_url=constants.FAKE_BASE_URL,
        token=constants.TOKEN,
        org_name=constants.ORG_NAME,
        user=constants.USER,
    )


@pytest.fixture
def registry():
    return CollectorRegistry()


@pytest.fixture
def stats(registry):
    return StatsRecorder(registry=registry)


@pytest.fixture
def records_file(tmp_path):
    return tmp_path / "data" / "records.json"


@pytest.fixture
def store(records_file):
    return JSONRecordStore(records_file)


@pytest.fixture
def private_assignment():
    return plug.Assignment(
        slug=constants.ASSIGNMENT_SLUG,
        organization=constants.ORGANIZATION,
        private=True,
    )


@pytest.fixture
def public_assignment():
    return plug.Assignment(
        slug=constants.ASSIGNMENT_SLUG,
        organization=constants.ORGANIZATION,
        private=False,
    )


@pytest.fixture
def student():
    return constants.STUDENT


@pytest.fixture
def empty_config_mock(tmp_path):
    config_file = tmp_path / "config.ini"
    config_file.touch()
    return config_file


@pytest.fixture
def config_mock(empty_config_mock):
    empty_config_mock.write_text(
        os.linesep.join(
            [
                f"[{plug.Config.CORE_SECTION_NAME}]",
                f"user = {constants.USER}",
                f"base_url = {constants.BASE_URL}",
                f"org_name = {constants.ORG_NAME}",
                f"token = {constants.CONFIG_TOKEN}",
            ]
        ),
        encoding="utf8",
    )
    return empty_config_mock
