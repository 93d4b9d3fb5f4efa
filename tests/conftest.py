# SPDX-License-Identifier: MIT

from typing import Any, Callable

import pendulum
import pytest

from tasknotes import configuration
from tasknotes.model.task import TaskInfo
from tasknotes.repository.configuration import CONFIGURATION_REPO
from tasknotes.template.task import get_task_template


@pytest.fixture(autouse=True)
def utc_local_timezone():
    """Run every test with UTC as the host's local timezone unless it sets another."""
    with pendulum.test_local_timezone(pendulum.timezone("UTC")):
        yield


@pytest.fixture(autouse=True)
def config_path(tmp_path, monkeypatch):
    """Point the configuration at a temporary directory with no file in it yet."""
    config_dir = tmp_path / "tasknotes"
    monkeypatch.setattr(configuration, "CONFIG_PATH", config_dir)
    monkeypatch.setattr(configuration, "APP_CONFIG_PATH", config_dir / "config.yaml")
    CONFIGURATION_REPO.reset()
    yield config_dir / "config.yaml"
    CONFIGURATION_REPO.reset()


@pytest.fixture
def make_task() -> Callable[..., TaskInfo]:
    def _make_task(task_id: str = "tasks/example.md", **fields: Any) -> TaskInfo:
        task = get_task_template(task_id, "Example")
        task.update(fields)  # type: ignore[typeddict-item]
        return task

    return _make_task
