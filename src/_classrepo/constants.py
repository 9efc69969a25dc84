"""Module for constants used throughout classrepo.

.. module:: constants
    :synopsis: Constants used throughout classrepo.
"""
import pathlib

import appdirs  # type: ignore

import classrepo_plug as plug

import _classrepo

CONFIG_DIR = pathlib.Path(
    appdirs.user_config_dir(
        appname=_classrepo._external_package_name,
        appauthor=_classrepo.__author__,
    )
)
LOG_DIR = pathlib.Path(
    appdirs.user_log_dir(
        appname=_classrepo._external_package_name,
        appauthor=_classrepo.__author__,
    )
)
DATA_DIR = pathlib.Path(
    appdirs.user_data_dir(
        appname=_classrepo._external_package_name,
        appauthor=_classrepo.__author__,
    )
)
MAX_LOGFILE_SIZE = 1024 * 1024 * 10  # 10 MiB
DEFAULT_CONFIG_FILE = CONFIG_DIR / "config.ini"
DEFAULT_RECORDS_FILE = DATA_DIR / "records.json"
DEFAULT_BASE_URL = "https://api.github.com"
assert DEFAULT_CONFIG_FILE.is_absolute()

# arguments that can be configured via config file
ORDERED_CONFIGURABLE_ARGS = (
    "user",
    "base_url",
    "org_name",
    "token",
    "records_file",
    plug.Config.PARENT_CONFIG_KEY,
)
CONFIGURABLE_ARGS = set(ORDERED_CONFIGURABLE_ARGS)
REQUIRED_ARGS = ("user", "org_name", "token")

TOKEN_ENV = "CLASSREPO_TOKEN"

# metric names
REPO_CREATE_TIME = "repo.create.time"
REPO_CREATE_SUCCESS = "repo.create.success"
REPO_CREATE_FAIL = "repo.create.fail"
