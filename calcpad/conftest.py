import pytest

from calcpad.config import get_settings
from calcpad.modes import Mode
from calcpad.session import Calculator


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    outcome = yield
    report = outcome.get_result()
    if report.when == "call":
        print(f"TEST: {item.name} - {'PASSED' if report.passed else 'FAILED'}")


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch, tmp_path):
    """Keep CALCPAD_* variables and any .env file of the developer out of tests."""
    for var in ("CALCPAD_LOG_LEVEL", "CALCPAD_HISTORY_LIMIT", "CALCPAD_DEFAULT_MODE", "CALCPAD_PROMPT_HISTORY"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def calc():
    return Calculator()


@pytest.fixture
def sci():
    return Calculator(mode=Mode.SCIENTIFIC)


@pytest.fixture
def prog():
    return Calculator(mode=Mode.PROGRAMMER)

