"""config module.

Contains the code required for reading the connection settings that a
provisioning run needs from the config file.

.. module:: config
    :synopsis: Reading and validating the classrepo config file.
"""
import configparser
import dataclasses
import os
import pathlib
from typing import Mapping, Union

import classrepo_plug as plug

from _classrepo import constants, exception


@dataclasses.dataclass(frozen=True)
class Settings:
    """Connection and storage settings read from the config file."""

    user: str
    org_name: str
    token: str = dataclasses.field(repr=False)
    base_url: str = constants.DEFAULT_BASE_URL
    records_file: pathlib.Path = constants.DEFAULT_RECORDS_FILE


def _check_defaults(
    defaults: Mapping[str, str], config_file: Union[str, pathlib.Path]
):
    """Raise an exception if defaults contain keys that are not configurable
    arguments.

    Args:
        defaults: A dictionary of defaults.
        config_file: Path to the config file.
    """
    configured = defaults.keys()
    if (
        configured - constants.CONFIGURABLE_ARGS
    ):  # there are surpluss arguments
        raise exception.FileError(
            f"config file at {config_file} contains invalid default keys: "
            f"{', '.join(sorted(configured - constants.CONFIGURABLE_ARGS))}"
        )


def check_config_integrity(config_file: Union[str, pathlib.Path]) -> None:
    """Raise an exception if the configuration file contains syntactical
    errors, or if the defaults are misconfigured.

    Args:
        config_file: path to the config file.
    """
    config_file = pathlib.Path(config_file)
    if not config_file.is_file():
        raise exception.FileError(
            "no config file found, expected location: " + str(config_file)
        )

    try:
        config_parser = _read_config(config_file)
    except configparser.ParsingError as exc:
        errors = ", ".join(
            f"(line {line_nr}: {line})" for line_nr, line in exc.errors
        )
        raise exception.FileError(
            msg=(
                f"config file at {config_file} contains syntax errors: "
                f"{errors}"
            )
        )
    _check_defaults(
        dict(config_parser[plug.Config.CORE_SECTION_NAME]), config_file
    )


def read_settings(config_file: Union[str, pathlib.Path]) -> Settings:
    """Read the settings from the config file, and from the token
    environment variable.

    Args:
        config_file: path to the config file.
    Returns:
        The settings.
    Raises:
        exception.FileError: If the config file is missing or misconfigured,
            or if a required setting is missing.
    """
    config_file = pathlib.Path(config_file)
    check_config_integrity(config_file)
    defaults = _read_defaults(config_file)

    missing = [arg for arg in constants.REQUIRED_ARGS if not defaults.get(arg)]
    if missing:
        raise exception.FileError(
            f"config file at {config_file} is missing required settings: "
            f"{', '.join(missing)}"
        )

    records_file = defaults.get("records_file")
    return Settings(
        user=defaults["user"],
        org_name=defaults["org_name"],
        token=defaults["token"],
        base_url=defaults.get("base_url") or constants.DEFAULT_BASE_URL,
        records_file=_resolve_path(records_file, config_file)
        if records_file
        else constants.DEFAULT_RECORDS_FILE,
    )


def _resolve_path(raw_path: str, config_file: pathlib.Path) -> pathlib.Path:
    path = pathlib.Path(raw_path).expanduser()
    return path if path.is_absolute() else config_file.parent / path


def _read_defaults(config_file: pathlib.Path) -> dict:
    """Read the defaults of an existing config file, with the token taken
    from the environment if it's set there.
    """
    try:
        config = plug.Config(config_file)
    except plug.PlugError as exc:
        raise exception.FileError(str(exc)) from exc

    section = config[plug.Config.CORE_SECTION_NAME]
    defaults = {
        key: section[key]
        for key in constants.ORDERED_CONFIGURABLE_ARGS
        if key in section
    }
    token = os.getenv(constants.TOKEN_ENV)
    if token:
        if defaults.get("token"):
            plug.log.warning(
                f"{constants.TOKEN_ENV} environment variable overrides token "
                "in config file"
            )
        defaults["token"] = token
    return defaults


def _read_config(config_file: pathlib.Path) -> configparser.ConfigParser:
    config_parser = configparser.ConfigParser()
    try:
        config_parser.read(str(config_file))
    except configparser.MissingSectionHeaderError:
        pass  # handled by the next check

    if plug.Config.CORE_SECTION_NAME not in config_parser:
        raise exception.FileError(
            f"config file at '{str(config_file)}' does not contain the "
            f"required [{plug.Config.CORE_SECTION_NAME}] header"
        )

    return config_parser
