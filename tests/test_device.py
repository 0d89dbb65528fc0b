"""
Tests for the device model and environment configuration.
"""

import json
import uuid
from pathlib import Path

import pytest

from mdevcallout.device import Environment, MDev, ROOT_ENV_VAR

from tests.conftest import MDEV_TYPE, PARENT, UUID


class TestEnvironment:
    def test_default_directories(self, tmp_path):
        env = Environment(root=tmp_path)
        assert env.callout_dirs() == [
            tmp_path / "etc/mdevctl.d/scripts.d/callouts",
            tmp_path / "usr/lib/mdevctl/scripts.d/callouts",
        ]
        assert env.notification_dirs() == [
            tmp_path / "etc/mdevctl.d/scripts.d/notifiers",
            tmp_path / "usr/lib/mdevctl/scripts.d/notifiers",
        ]

    def test_config_directories_come_first(self, tmp_path):
        config = tmp_path / "config.yaml"
        config.write_text(
            f"root: {tmp_path}\n"
            "callout_dirs:\n"
            "  - /opt/callouts\n"
            "notification_dirs:\n"
            "  - /opt/notifiers\n"
        )

        env = Environment.from_config(config)

        assert env.root == tmp_path
        assert env.callout_dirs()[0] == Path("/opt/callouts")
        assert env.callout_dirs()[1] == tmp_path / "etc/mdevctl.d/scripts.d/callouts"
        assert env.notification_dirs()[0] == Path("/opt/notifiers")

    def test_missing_config_gives_defaults(self, tmp_path):
        env = Environment.from_config(tmp_path / "absent.yaml")
        assert env.root == Path("/")
        assert len(env.callout_dirs()) == 2

    def test_malformed_config_gives_defaults(self, tmp_path, caplog):
        config = tmp_path / "config.yaml"
        config.write_text("callout_dirs: [unclosed\n")

        env = Environment.from_config(config)

        assert env.extra_callout_dirs == []
        assert "Failed to load configuration file" in caplog.text

    def test_root_precedence(self, tmp_path, monkeypatch):
        config = tmp_path / "config.yaml"
        config.write_text("root: /from-config\n")

        assert Environment.from_config(config).root == Path("/from-config")

        monkeypatch.setenv(ROOT_ENV_VAR, "/from-env")
        assert Environment.from_config(config).root == Path("/from-env")
        assert Environment.from_config(config, root=tmp_path).root == tmp_path


class TestMDev:
    def test_uuid_is_parsed(self, env):
        dev = MDev(env, UUID)
        assert dev.uuid == uuid.UUID(UUID)

    def test_invalid_uuid(self, env):
        with pytest.raises(ValueError):
            MDev(env, "not-a-uuid")

    def test_to_json(self, device):
        assert device.to_json() == {
            "mdev_type": MDEV_TYPE,
            "start": "manual",
            "attrs": [{"mdev/attr": "value"}],
        }
        assert device.to_json(include_uuid=True)["uuid"] == UUID

    def test_to_json_string_is_compact(self, device):
        assert device.to_json_string() == (
            '{"mdev_type":"%s","start":"manual","attrs":[{"mdev/attr":"value"}]}' % MDEV_TYPE
        )

    def test_from_json(self, env):
        data = json.loads('{"mdev_type": "t", "start": "auto", "attrs": [{"a": "1"}, {"b": 2}]}')
        dev = MDev.from_json(env, UUID, PARENT, data)

        assert dev.mdev_type == "t"
        assert dev.autostart
        assert dev.attrs == [("a", "1"), ("b", "2")]
        assert dev.parent == PARENT

    @pytest.mark.parametrize("data", [
        [],
        {"start": "sometimes"},
        {"attrs": [{"a": "1", "b": "2"}]},
    ])
    def test_from_json_rejects_malformed(self, env, data):
        with pytest.raises(ValueError):
            MDev.from_json(env, UUID, PARENT, data)
