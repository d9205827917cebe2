from pathlib import Path

import pytest

from settings import SERIALIZED, UNSERIALIZED, Settings, load_env_from_dotenv, load_settings

_VARS = (
    "TODOS_FILE",
    "TODOS_EVENT_LOG",
    "TODOS_WRITE_MODE",
    "TODOS_HOST",
    "TODOS_PORT",
    "TODOS_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    # setenv first so teardown also removes values a .env file seeded.
    for name in _VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)


def test_defaults() -> None:
    assert load_settings() == Settings()
    assert Settings().write_mode == UNSERIALIZED
    assert Settings().port == 3000


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TODOS_FILE", "/srv/todos.json")
    monkeypatch.setenv("TODOS_WRITE_MODE", "Serialized")
    monkeypatch.setenv("TODOS_PORT", "8080")

    settings = load_settings()
    assert settings.todos_file == "/srv/todos.json"
    assert settings.write_mode == SERIALIZED
    assert settings.port == 8080


def test_invalid_values_fall_back(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TODOS_WRITE_MODE", "optimistic")
    monkeypatch.setenv("TODOS_PORT", "not-a-port")

    settings = load_settings()
    assert settings.write_mode == UNSERIALIZED
    assert settings.port == 3000


def test_dotenv_does_not_override_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    (tmp_path / ".env").write_text(
        "# comment\n"
        'TODOS_FILE="/from/dotenv.json"\n'
        "export TODOS_HOST=0.0.0.0\n"
        "TODOS_PORT=9000\n"
        "garbage line\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("TODOS_PORT", "7000")

    settings = load_settings()
    assert settings.todos_file == "/from/dotenv.json"
    assert settings.host == "0.0.0.0"
    assert settings.port == 7000


def test_missing_dotenv_is_ignored(tmp_path: Path) -> None:
    load_env_from_dotenv(str(tmp_path / "absent.env"))
