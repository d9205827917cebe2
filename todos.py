import json
import os
import tempfile
from contextlib import suppress
from typing import List

from pydantic import BaseModel, ConfigDict, PositiveInt, TypeAdapter, constr
from pydantic import ValidationError as SchemaError

from errors import StorageError


class Todo(BaseModel):
    # Fields added by hand to the file survive the next rewrite.
    model_config = ConfigDict(extra="allow")

    id: PositiveInt
    title: constr(min_length=1)
    completed: bool = False


_COLLECTION = TypeAdapter(List[Todo])


class TodoFileStore:
    """
    Whole-collection persistence for todos in a single JSON file.
    - load() reads and validates every entry; empty content is malformed.
    - save() writes a pretty-printed copy beside the file, then swaps it in,
      so readers never observe a half-written file.
    """

    def __init__(self, path: str):
        self.path = path

    def _directory(self) -> str:
        return os.path.dirname(self.path) or "."

    def _ensure_todos_file(self):
        os.makedirs(self._directory(), exist_ok=True)
        if not os.path.exists(self.path):
            with open(self.path, "w", encoding="utf-8") as f:
                f.write("[]\n")

    def load(self) -> List[Todo]:
        try:
            self._ensure_todos_file()
            with open(self.path, "r", encoding="utf-8") as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Cannot read {self.path}: {e}") from e

        try:
            raw = json.loads(content)
        except ValueError as e:
            raise StorageError(f"Malformed JSON in {self.path}: {e}") from e
        if not isinstance(raw, list):
            raise StorageError(f"Expected a JSON array in {self.path}")
        try:
            return _COLLECTION.validate_python(raw)
        except SchemaError as e:
            raise StorageError(f"Invalid todo entry in {self.path}: {e}") from e

    def save(self, todos: List[Todo]) -> None:
        payload = json.dumps([t.model_dump() for t in todos], indent=2, ensure_ascii=False)
        try:
            os.makedirs(self._directory(), exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".todos-", suffix=".tmp", dir=self._directory())
        except OSError as e:
            raise StorageError(f"Cannot write {self.path}: {e}") from e
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload + "\n")
            os.replace(tmp_path, self.path)
        except OSError as e:
            with suppress(OSError):
                os.unlink(tmp_path)
            raise StorageError(f"Cannot write {self.path}: {e}") from e
