"""Helpers related to configuration."""
import configparser
import os
import pathlib

from typing import Any, List, Optional, Tuple

from typing_extensions import Protocol

from classrepo_plug import exceptions

__all__ = ["Config", "ConfigSection"]


class ConfigSection(Protocol):
    """Protocol defining how a section of the config behaves."""

    def __getitem__(self, key: str) -> Any:
        ...

    def __setitem__(self, key: str, value: Any) -> None:
        ...

    def __contains__(self, key: str) -> bool:
        ...


class Config:
    """Object representing classrepo's config file.

    Reading a value does a recursive lookup in parent configs, declared with
    the ``parent_config`` key of the core section. Writing only ever touches
    this config, and :py:meth:`store` only writes this config's file.

    .. important::

        Changes to the config are only persisted if :py:meth:`store` is
        called.
    """

    CORE_SECTION_NAME = "classrepo"
    PARENT_CONFIG_KEY = "parent_config"

    def __init__(
        self,
        config_path: pathlib.Path,
        _children: Tuple[pathlib.Path, ...] = (),
    ):
        self._config_path = pathlib.Path(config_path)
        self._config_parser = configparser.ConfigParser()
        self._parent: Optional[Config] = None
        self._children = _children
        self._config_parser.add_section(self.CORE_SECTION_NAME)
        self.refresh()

    def refresh(self) -> None:
        """Re-read the config file. Does nothing if the file does not exist.
        """
        if not self._config_path.exists():
            return

        self._config_parser.read(self._config_path)
        raw_parent_path = self._config_parser.get(
            self.CORE_SECTION_NAME, self.PARENT_CONFIG_KEY, fallback=None
        )
        if raw_parent_path:
            parent_path = pathlib.Path(raw_parent_path)
            if not parent_path.is_absolute():
                parent_path = (self.path.parent / parent_path).resolve(
                    strict=False
                )
            lineage = self._children + (self.path,)
            if parent_path in lineage:
                cycle = " -> ".join(map(str, lineage + (parent_path,)))
                raise exceptions.PlugError(
                    f"Cyclic inheritance detected in config: {cycle}"
                )
            self._parent = Config(parent_path, _children=lineage)

    def store(self) -> None:
        """Write this config to its file, creating the directory if needed.
        """
        if not self._config_path.exists():
            os.makedirs(self._config_path.parent, mode=0o700, exist_ok=True)

        with open(self._config_path, encoding="utf8", mode="w") as f:
            self._config_parser.write(f)

    def get(
        self, section_name: str, key: str, fallback: Optional[Any] = None
    ) -> Optional[Any]:
        """Get a value from the given section, falling back on the parent
        config.

        Args:
            section_name: Name of the section.
            key: Key to get the value for.
            fallback: Value to return if neither this config nor any parent
                has the key.
        Returns:
            The value for the section and key, or the fallback.
        """
        parent_value = (
            self.parent.get(section_name, key, fallback)
            if self.parent
            else fallback
        )
        return self._config_parser.get(
            section_name, key, fallback=parent_value
        )

    @property
    def path(self) -> pathlib.Path:
        """Path to the config file."""
        return self._config_path

    @property
    def parent(self) -> Optional["Config"]:
        """The parent config if defined, otherwise None."""
        return self._parent

    @parent.setter
    def parent(self, value: "Config") -> None:
        self._parent = value
        self[self.CORE_SECTION_NAME][self.PARENT_CONFIG_KEY] = str(value.path)
        self._check_for_cycle([])

    def __getitem__(self, section_key: str) -> ConfigSection:
        if section_key not in self._config_parser:
            self._config_parser.add_section(section_key)
        return _ParentAwareConfigSection(self, section_key)

    def __contains__(self, section_name: str) -> bool:
        return section_name in self._config_parser

    def _check_for_cycle(self, paths: List[pathlib.Path]) -> None:
        if self.path in paths:
            cycle = " -> ".join(map(str, paths + [self.path]))
            raise exceptions.PlugError(
                f"Cyclic inheritance detected in config: {cycle}"
            )
        elif self.parent is not None:
            self.parent._check_for_cycle(paths + [self.path])


class _ParentAwareConfigSection:
    """A section of the config that respects sections from parent configs."""

    def __init__(self, config: Config, section_key: str):
        self._config = config
        self._section_key = section_key

    def __getitem__(self, key: str):
        value = self._config.get(self._section_key, key)
        if value is None:
            raise KeyError(key)
        return value

    def __setitem__(self, key: str, value: Any):
        self._config._config_parser.set(self._section_key, key, value)

    def __contains__(self, key: str) -> bool:
        return self._config.get(self._section_key, key) is not None
