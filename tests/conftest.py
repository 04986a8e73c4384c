"""
Pytest fixtures and configuration for cmdrunner tests.
"""
import tempfile
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import yaml

from cmdrunner.backends.subprocess_executor import SubprocessExecutor
from cmdrunner.di import DependencyContainer, set_container
from cmdrunner.interfaces.process import ExecutionResult, ProcessExecutor
from cmdrunner.models import RunnerSettings


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def settings():
    """Settings with a short reader grace period."""
    return RunnerSettings(reader_grace_period=1.0)


@pytest.fixture(autouse=True)
def container(settings):
    """Isolate tests from settings files and CMDRUNNER_* variables on the host."""
    container = DependencyContainer()
    container.register(RunnerSettings, instance=settings)
    container.register(ProcessExecutor, SubprocessExecutor)
    set_container(container)
    yield container
    set_container(None)


@pytest.fixture
def mock_executor(container):
    """Replace the process executor with a mock that reports success."""
    executor = MagicMock(spec=ProcessExecutor)
    executor.execute.return_value = ExecutionResult(
        exit_code=0,
        output="ok\n",
        pid=4242,
        duration=0.01,
    )
    container.register(ProcessExecutor, instance=executor)
    return executor


@pytest.fixture
def settings_file(temp_dir):
    """Write a .cmdrunner.yaml into a temporary directory."""
    path = temp_dir / ".cmdrunner.yaml"
    path.write_text(
        yaml.dump(
            {
                "timeout": 30,
                "merge_stderr": False,
                "encoding": "latin-1",
                "log_level": "debug",
            }
        )
    )
    return path


# Markers for test categories
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "slow: Slow tests")
    config.addinivalue_line("markers", "integration: Tests that spawn real processes")
