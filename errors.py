class TodoError(Exception):
    """Base class for errors raised while serving todo requests."""


class ValidationError(TodoError):
    """Bad input: non-numeric id, blank title, malformed body."""


class NotFound(TodoError):
    """No todo with the requested id."""

    def __init__(self, todo_id: int):
        super().__init__(f"Todo {todo_id} not found")
        self.todo_id = todo_id


class StorageError(TodoError):
    """The persisted file could not be read, parsed or written."""
