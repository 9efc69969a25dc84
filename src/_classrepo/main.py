"""Main entrypoint for provisioning repositories with classrepo.

.. module:: main
    :synopsis: Wiring of the platform API, record store and metrics from the
        config file.
"""
import logging
import os
import pathlib
import re
import sys
from typing import Optional, Union

import daiquiri

import classrepo_plug as plug

import _classrepo
from _classrepo import constants, exception
from _classrepo.config import Settings, read_settings
from _classrepo.ext.github import GitHubAPI
from _classrepo.provisioning import (
    Creator,
    JSONRecordStore,
    ProvisioningOutcome,
    StatsRecorder,
)


def run(
    assignment: plug.Assignment,
    user: plug.User,
    config_file: Union[str, pathlib.Path] = constants.DEFAULT_CONFIG_FILE,
    stats: Optional[StatsRecorder] = None,
) -> ProvisioningOutcome:
    """Provision a repository for the user, using the settings of the given
    config file. The platform API and record store are built from the
    settings.

    As an example, provisioning a private repository for ``alice``:

    .. code-block:: python

        import classrepo
        import classrepo_plug as plug

        org = plug.Organization("dd1337-fall")
        assignment = plug.Assignment("task-1", organization=org, private=True)
        user = plug.User("alice", token="<alice's token>")
        outcome = classrepo.run(assignment, user, config_file="config.ini")

    Args:
        assignment: The assignment to provision a repository for.
        user: The student to provision a repository for.
        config_file: Path to the configuration file.
        stats: Recorder for timings and counts.
    Returns:
        The outcome of the provisioning attempt.
    Raises:
        exception.FileError: If the config file is missing or misconfigured.
        classrepo_plug.PlatformError: If the platform can't be reached with
            the configured settings.
    """
    settings = read_settings(config_file)
    _check_organization(settings, assignment)
    api = create_api(settings)
    store = JSONRecordStore(settings.records_file)
    return Creator(api, store, stats).provision(assignment, user)


def verify_settings(
    config_file: Union[str, pathlib.Path] = constants.DEFAULT_CONFIG_FILE
) -> None:
    """Check that the settings of the config file give access to the
    organization, before any repository is provisioned with them. Progress
    is logged at info level.

    Args:
        config_file: Path to the configuration file.
    Raises:
        exception.FileError: If the config file is missing or misconfigured.
        classrepo_plug.PlatformError: If the platform rejects the settings,
            e.g. with :py:class:`~classrepo_plug.BadCredentials` if the token
            lacks a required scope.
    """
    settings = read_settings(config_file)
    GitHubAPI.verify_settings(
        user=settings.user,
        org_name=settings.org_name,
        base_url=settings.base_url,
        token=settings.token,
    )


def create_api(settings: Settings) -> GitHubAPI:
    return GitHubAPI(
        base_url=settings.base_url,
        token=settings.token,
        org_name=settings.org_name,
        user=settings.user,
    )


def _check_organization(
    settings: Settings, assignment: plug.Assignment
) -> None:
    if assignment.organization.login != settings.org_name:
        raise exception.FileError(
            f"assignment {assignment.slug} belongs to "
            f"{assignment.organization.login}, but the config file is set "
            f"up for {settings.org_name}"
        )


def _filter_tokens():
    """Filter out any secure tokens from log output."""
    old_factory = logging.getLogRecordFactory()

    def record_factory(*args, **kwargs):
        record = old_factory(*args, **kwargs)
        if isinstance(record.msg, str):
            # from URLS (e.g. git error messages)
            record.msg = re.sub("https://.*?@", "https://", record.msg)
            # from config file contents
            record.msg = re.sub(
                r"token\s*=\s*.*", "token = xxxxxxxxx", record.msg
            )
        return record

    logging.setLogRecordFactory(record_factory)


def setup_logging(terminal_level: int = logging.WARNING) -> None:
    """Setup logging by creating the required log directory and setting up
    the logger.

    Args:
        terminal_level: The logging level to use for printing to stderr.
    """
    logfile = constants.LOG_DIR / f"{_classrepo._external_package_name}.log"
    _ensure_size_less(logfile, max_size=constants.MAX_LOGFILE_SIZE)
    try:
        os.makedirs(str(constants.LOG_DIR), exist_ok=True)
    except Exception as exc:
        raise exception.FileError(
            f"can't create log directory at {constants.LOG_DIR}"
        ) from exc

    daiquiri.setup(
        level=logging.DEBUG,
        outputs=(
            daiquiri.output.Stream(
                sys.stderr,
                formatter=daiquiri.formatter.ColorFormatter(
                    fmt="%(color)s[%(levelname)s] %(message)s%(color_stop)s"
                ),
                level=terminal_level,
            ),
            daiquiri.output.File(
                filename=str(logfile),
                formatter=daiquiri.formatter.ColorFormatter(
                    fmt="%(asctime)s [PID %(process)d] [%(levelname)s] "
                    "%(name)s -> %(message)s"
                ),
                level=logging.DEBUG,
            ),
        ),
    )

    _filter_tokens()


def _ensure_size_less(path: pathlib.Path, max_size: int) -> None:
    if not path.exists():
        return
    file_size = path.stat().st_size
    if file_size >= max_size:
        target = file_size - max_size // 2
        with open(path, mode="rb") as f:
            cur = target
            f.seek(cur)
            while f.read(1) != b"\n" and cur < file_size:
                cur += 1
                f.seek(cur)

            with open(
                path.parent / (path.name + ".tmp"), mode="wb"
            ) as tmp_file:
                for line in f.readlines():
                    tmp_file.write(line)

        path.unlink()
        pathlib.Path(tmp_file.name).rename(path)
