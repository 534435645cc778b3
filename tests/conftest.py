"""
Pytest configuration: default runs most tests; use --run-slow to include slow tests.
"""

import pytest

import studiolens.core.config as config_module
from studiolens.core.key_store import set_key_store

_KEY_ENV_VARS = ("GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY")


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="Run slow tests (live Gemini API). Default: skip them.",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if config.getoption("--run-slow", False):
        return
    skip_slow = pytest.mark.skip(reason="Slow test; run with --run-slow to include")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


@pytest.fixture(autouse=True)
def isolated_credentials(request: pytest.FixtureRequest, monkeypatch: pytest.MonkeyPatch, tmp_path):
    """Keep unit tests away from the real key file, env keys and shared globals."""
    if "slow" in request.keywords:
        yield
        return
    for name in _KEY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.delenv("STUDIOLENS_VERBOSITY", raising=False)
    monkeypatch.setenv("STUDIOLENS_KEY_FILE", str(tmp_path / "credentials.json"))
    monkeypatch.setattr(config_module, "_global_config", None)
    set_key_store(None)
    yield
    set_key_store(None)
