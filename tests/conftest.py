"""
Pytest configuration and fixtures.
"""

import shlex
import stat
from pathlib import Path
from typing import List, Optional

import pytest

from mdevcallout.device import Environment, MDev, ROOT_ENV_VAR

UUID = "976d8cc2-4bfc-43b9-b9f9-f4af2de91ab9"
PARENT = "0000:00:03.0"
MDEV_TYPE = "i915-GVTg_V5_4"


def write_script(
    directory: Path,
    name: str,
    exit_code: int = 0,
    log: Optional[Path] = None,
    stdout: str = "",
    stderr: str = "",
    echo_stdin: bool = False,
    body: str = "",
) -> Path:
    """Helper to create an executable shell script.

    Every run appends "<name> <args>" to ``log`` and, when ``log`` is set,
    the payload it read to ``<log>.stdin``.
    """
    directory.mkdir(parents=True, exist_ok=True)
    lines = ["#!/bin/sh"]
    if log is not None:
        lines.append(f'echo "$(basename "$0") $*" >> {shlex.quote(str(log))}')
        if echo_stdin:
            lines.append(f"tee -a {shlex.quote(str(log) + '.stdin')}")
        else:
            lines.append(f"cat >> {shlex.quote(str(log) + '.stdin')}")
    elif echo_stdin:
        lines.append("cat")
    if stdout:
        lines.append(f"printf '%s' {shlex.quote(stdout)}")
    if stderr:
        lines.append(f"printf '%s' {shlex.quote(stderr)} >&2")
    if body:
        lines.append(body)
    lines.append(f"exit {exit_code}")

    script = directory / name
    script.write_text("\n".join(lines) + "\n")
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script


def calls(log: Path) -> List[str]:
    """Lines recorded by scripts written with ``write_script``."""
    if not log.exists():
        return []
    return log.read_text().splitlines()


def args_for(event: str, action: str, state: str) -> str:
    return f"-t {MDEV_TYPE} -e {event} -a {action} -s {state} -u {UUID} -p {PARENT}"


@pytest.fixture(autouse=True)
def no_root_override(monkeypatch):
    monkeypatch.delenv(ROOT_ENV_VAR, raising=False)


@pytest.fixture
def env(tmp_path: Path) -> Environment:
    """Environment rooted in a scratch directory."""
    return Environment(root=tmp_path / "root")


@pytest.fixture
def callout_dir(env: Environment) -> Path:
    path = env.callout_dirs()[0]
    path.mkdir(parents=True)
    return path


@pytest.fixture
def lib_callout_dir(env: Environment) -> Path:
    path = env.callout_dirs()[1]
    path.mkdir(parents=True)
    return path


@pytest.fixture
def notifier_dir(env: Environment) -> Path:
    path = env.notification_dirs()[0]
    path.mkdir(parents=True)
    return path


@pytest.fixture
def lib_notifier_dir(env: Environment) -> Path:
    path = env.notification_dirs()[1]
    path.mkdir(parents=True)
    return path


@pytest.fixture
def log(tmp_path: Path) -> Path:
    return tmp_path / "calls.log"


@pytest.fixture
def device(env: Environment) -> MDev:
    return MDev(
        env,
        UUID,
        parent=PARENT,
        mdev_type=MDEV_TYPE,
        attrs=[("mdev/attr", "value")],
    )
