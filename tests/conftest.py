from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from main import create_app
from repository import TodoRepository
from settings import Settings
from todos import TodoFileStore


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        todos_file=str(tmp_path / "data" / "todos.json"),
        event_log_file=str(tmp_path / "data" / "logs.txt"),
    )


@pytest.fixture()
def store(settings: Settings) -> TodoFileStore:
    return TodoFileStore(settings.todos_file)


@pytest.fixture()
def repo(store: TodoFileStore) -> TodoRepository:
    return TodoRepository(store)


@pytest.fixture()
def client(settings: Settings) -> TestClient:
    return TestClient(create_app(settings))
