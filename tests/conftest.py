"""
Shared pytest fixtures for the promptozaurus test suite.

Every test runs with an isolated user config directory and without
PROMPTOZAURUS_* environment overrides, so a developer's own settings never
leak into results.

Usage in tests:
    def test_something(factory):
        block = factory.add_block("Notes", ["Hello"])
        ...

    def test_with_data(sample_env):
        # sample_env comes pre-populated (see ProjectFactory.create_sample_project)
        path = sample_env.save()
"""

import pytest

from promptozaurus.config import ConfigManager, ENV_OVERRIDES
from promptozaurus.observability import setup_logging
from tests.factories import ProjectFactory


setup_logging("WARNING")


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point user config at tmp_path and clear environment overrides."""
    user_file = tmp_path / "home" / ".promptozaurus" / "config.yaml"
    monkeypatch.setattr(ConfigManager, "USER_CONFIG_FILE", user_file)
    for env_name in ENV_OVERRIDES:
        monkeypatch.delenv(env_name, raising=False)
    monkeypatch.delenv("PROMPTOZAURUS_PROJECT_PATH", raising=False)
    return user_file


@pytest.fixture
def factory(tmp_path):
    """
    Create an empty ProjectFactory.

    Example:
        def test_block_total(factory):
            block = factory.add_block("Notes", ["0123456789"])
            assert block.total_chars == 10
    """
    return ProjectFactory(tmp_path)


@pytest.fixture
def sample_env(tmp_path):
    """ProjectFactory pre-populated with the sample project."""
    factory = ProjectFactory(tmp_path)
    factory.create_sample_project()
    return factory
