"""Shared test fixtures for the Courier test suite."""

import os
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest

from courier.requests.config import LifecycleConfig
from tests.factories import RecordingStore, mock_transport_factory, ok_handler
from tests.factories.transport import Handler


@pytest.fixture
def test_config_dir(tmp_path: Path) -> Path:
    """Create a temporary config directory for testing."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def mock_toml_files(test_config_dir: Path) -> Callable[[dict[str, str]], None]:
    """Factory fixture to create TOML files in the test config directory.

    Usage:
        def test_something(mock_toml_files):
            mock_toml_files({
                "default.toml": "app_name = 'test'",
                "development.toml": "debug = true",
            })
    """

    def _create_toml_files(files: dict[str, str]) -> None:
        for filename, content in files.items():
            (test_config_dir / filename).write_text(content)

    return _create_toml_files


class EnvOverrideContext:
    """Context manager for temporarily setting environment variables."""

    def __init__(self, overrides: dict[str, str]) -> None:
        self.overrides = overrides
        self.original_env: dict[str, str | None] = {}

    def __enter__(self) -> None:
        for key, value in self.overrides.items():
            self.original_env[key] = os.environ.get(key)
            os.environ[key] = value

    def __exit__(self, *args: Any) -> None:
        for key in self.overrides:
            original = self.original_env[key]
            if original is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = original


@pytest.fixture
def env_override() -> Callable[[dict[str, str]], EnvOverrideContext]:
    """Temporarily set environment variables.

    Usage:
        def test_something(env_override):
            with env_override({"COURIER_DEBUG": "true"}):
                ...
    """
    return EnvOverrideContext


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Clear the settings cache before and after each test."""
    from courier.config import get_settings
    from courier.config.settings import set_toml_config

    get_settings.cache_clear()
    set_toml_config({})
    yield
    get_settings.cache_clear()
    set_toml_config({})


@pytest.fixture
def make_config() -> Callable[..., LifecycleConfig]:
    """Build a LifecycleConfig whose transports answer through a mock handler."""

    def _make(handler: Handler = ok_handler, **overrides: Any) -> LifecycleConfig:
        return LifecycleConfig(transport_factory=mock_transport_factory(handler), **overrides)

    return _make


@pytest.fixture
def make_store(make_config: Callable[..., LifecycleConfig]) -> Callable[..., RecordingStore]:
    """Build a RecordingStore wired to a mock transport."""

    def _make(
        handler: Handler = ok_handler,
        state: dict[str, Any] | None = None,
        **overrides: Any,
    ) -> RecordingStore:
        return RecordingStore(make_config(handler, **overrides), state=state)

    return _make
