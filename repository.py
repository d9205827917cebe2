import logging
import threading
from contextlib import nullcontext
from typing import Any, List

from errors import NotFound
from settings import SERIALIZED, UNSERIALIZED, WRITE_MODES
from todos import Todo, TodoFileStore

logger = logging.getLogger(__name__)

# Fields a client may change through update(); "id" is assigned once.
_MUTABLE_FIELDS = ("title", "completed")


class TodoRepository:
    """
    CRUD over the todo collection. Every call reloads the file; mutations
    rewrite it in full.

    In "unserialized" mode concurrent create/update/delete calls each run
    their own load-mutate-save cycle, so two creates can pick the same id and
    a save can clobber another one (lost update). "serialized" mode holds a
    single lock around each cycle.
    """

    def __init__(self, store: TodoFileStore, mode: str = UNSERIALIZED):
        if mode not in WRITE_MODES:
            raise ValueError(f"Unknown write mode: {mode!r}")
        self.store = store
        self.mode = mode
        self._write_lock = threading.Lock() if mode == SERIALIZED else nullcontext()

    def list(self) -> List[Todo]:
        return self.store.load()

    def get_by_id(self, todo_id: int) -> Todo:
        for todo in self.store.load():
            if todo.id == todo_id:
                return todo
        raise NotFound(todo_id)

    def create(self, title: str, completed: bool = False) -> Todo:
        with self._write_lock:
            todos = self.store.load()
            # Last element, not max(): ids follow append order.
            last_id = todos[-1].id if todos else 0
            todo = Todo(id=last_id + 1, title=title, completed=completed)
            todos.append(todo)
            self.store.save(todos)
        logger.debug("Created todo %s", todo.id)
        return todo

    def update(self, todo_id: int, updates: dict[str, Any]) -> Todo:
        with self._write_lock:
            todos = self.store.load()
            index = _find_index(todos, todo_id)
            changes = {k: v for k, v in updates.items() if k in _MUTABLE_FIELDS}
            todos[index] = todos[index].model_copy(update=changes)
            self.store.save(todos)
        logger.debug("Updated todo %s fields=%s", todo_id, sorted(changes))
        return todos[index]

    def delete(self, todo_id: int) -> Todo:
        with self._write_lock:
            todos = self.store.load()
            index = _find_index(todos, todo_id)
            removed = todos.pop(index)
            self.store.save(todos)
        logger.debug("Deleted todo %s", todo_id)
        return removed


def _find_index(todos: List[Todo], todo_id: int) -> int:
    for index, todo in enumerate(todos):
        if todo.id == todo_id:
            return index
    raise NotFound(todo_id)
