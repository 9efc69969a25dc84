import pytest

from classrepo_plug import config
from classrepo_plug import exceptions


class TestConfig:
    """Tests for the Config class."""

    def test_detects_cyclic_inheritance(self, tmp_path):
        # arrange

        grandparent_path = tmp_path / "otherdir" / "grandparent.ini"
        parent_path = tmp_path / "dir" / "parent.ini"
        child_path = tmp_path / "classrepo.ini"

        grandparent = config.Config(grandparent_path)

        parent = config.Config(parent_path)
        parent.parent = grandparent

        child = config.Config(child_path)
        child.parent = parent

        # act/assert
        with pytest.raises(exceptions.PlugError) as exc_info:
            grandparent.parent = child

        cycle = " -> ".join(
            map(
                str,
                [grandparent_path, child_path, parent_path, grandparent_path],
            )
        )
        assert f"Cyclic inheritance detected in config: {cycle}" in str(
            exc_info.value
        )

    def test_detects_cyclic_inheritance_on_read(self, tmp_path):
        first_path = tmp_path / "first.ini"
        second_path = tmp_path / "second.ini"
        first_path.write_text(
            "[classrepo]\nparent_config = second.ini\n", encoding="utf8"
        )
        second_path.write_text(
            "[classrepo]\nparent_config = first.ini\n", encoding="utf8"
        )

        with pytest.raises(exceptions.PlugError) as exc_info:
            config.Config(first_path)

        assert "Cyclic inheritance detected in config" in str(exc_info.value)

    def test_get_option_from_parent(self, tmp_path):
        # arrange

        parent_path = tmp_path / "dir" / "parent.ini"
        child_path = tmp_path / "classrepo.ini"

        parent = config.Config(parent_path)
        parent_sec = "some-section"
        parent_opt = "some-option"
        parent_val = "some-value"
        parent[parent_sec][parent_opt] = parent_val

        # act
        child = config.Config(child_path)
        child.parent = parent
        fetched_val = child.get(parent_sec, parent_opt)

        # assert
        assert fetched_val == parent_val

    def test_resolves_section_from_parent(self, tmp_path):
        # arrange

        parent_path = tmp_path / "dir" / "parent.ini"
        child_path = tmp_path / "classrepo.ini"

        parent = config.Config(parent_path)
        parent_sec = "some-section"
        parent_opt = "some-option"
        parent_val = "some-value"
        parent[parent_sec][parent_opt] = parent_val

        # act
        child = config.Config(child_path)
        child.parent = parent
        fetched_section = child[parent_sec]

        # assert
        assert parent_opt in fetched_section
        assert fetched_section[parent_opt] == parent_val

    def test_child_value_shadows_parent_value(self, tmp_path):
        parent = config.Config(tmp_path / "parent.ini")
        parent[config.Config.CORE_SECTION_NAME]["user"] = "parent-user"
        child = config.Config(tmp_path / "child.ini")
        child.parent = parent
        child[config.Config.CORE_SECTION_NAME]["user"] = "child-user"

        assert child.get(config.Config.CORE_SECTION_NAME, "user") == (
            "child-user"
        )

    def test_missing_key_raises_key_error(self, tmp_path):
        conf = config.Config(tmp_path / "classrepo.ini")

        with pytest.raises(KeyError):
            conf[config.Config.CORE_SECTION_NAME]["user"]

    def test_store_and_refresh(self, tmp_path):
        path = tmp_path / "nested" / "classrepo.ini"
        conf = config.Config(path)
        conf[config.Config.CORE_SECTION_NAME]["org_name"] = "test-org"

        conf.store()

        assert config.Config(path).get(
            config.Config.CORE_SECTION_NAME, "org_name"
        ) == "test-org"

    def test_parent_path_relative_to_child(self, tmp_path):
        parent_path = tmp_path / "parent.ini"
        parent_path.write_text(
            "[classrepo]\nbase_url = https://api.github.com\n",
            encoding="utf8",
        )
        child_path = tmp_path / "child.ini"
        child_path.write_text(
            "[classrepo]\nparent_config = parent.ini\n", encoding="utf8"
        )

        conf = config.Config(child_path)

        assert conf.parent.path == parent_path.resolve()
        assert conf.get("classrepo", "base_url") == "https://api.github.com"
