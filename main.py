import json
import logging
import re
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from errors import NotFound, StorageError, ValidationError
from event_log import EventLog
from logging_setup import setup_logging
from repository import TodoRepository
from settings import Settings, load_settings
from todos import TodoFileStore

logger = logging.getLogger(__name__)

_ID_PATTERN = re.compile(r"\s*[+-]?[0-9]+\s*")


def _parse_id(raw: Optional[str]) -> int:
    if raw is None or not _ID_PATTERN.fullmatch(raw):
        raise ValidationError("Invalid id")
    try:
        return int(raw)
    except ValueError:
        # Digit strings past the interpreter's int conversion limit.
        raise ValidationError("Invalid id")


async def _read_json_object(request: Request, message: str) -> dict[str, Any]:
    body = await request.body()
    try:
        data = json.loads(body)
    except ValueError:
        raise ValidationError(message)
    if not isinstance(data, dict):
        raise ValidationError(message)
    return data


def _check_title(data: dict[str, Any], message: str) -> str:
    title = data.get("title")
    if not isinstance(title, str) or not title.strip():
        raise ValidationError(message)
    return title


def _check_completed(value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValidationError("Invalid completed flag")
    return value


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


async def _observe(request: Request) -> None:
    # Logs path plus query string, the way the request line carried it.
    path = request.url.path
    if request.url.query:
        path = f"{path}?{request.url.query}"
    await run_in_threadpool(request.app.state.event_log.notify, request.method, path)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or load_settings()

    app = FastAPI(title="Todos")
    app.state.settings = settings
    app.state.repository = TodoRepository(TodoFileStore(settings.todos_file), mode=settings.write_mode)
    app.state.event_log = EventLog(settings.event_log_file)
    logger.info(
        "Serving todos from %s (write mode: %s)", settings.todos_file, app.state.repository.mode
    )

    @app.exception_handler(StarletteHTTPException)
    async def unknown_route(request: Request, exc: StarletteHTTPException):
        # Unsupported methods on a known path count as unknown routes too.
        if exc.status_code in (404, 405):
            return PlainTextResponse("Endpoint not found", status_code=404)
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code)

    @app.get("/todos")
    async def list_todos(request: Request):
        """
        Return the whole collection as a JSON array.
        """
        await _observe(request)
        repo: TodoRepository = request.app.state.repository
        try:
            todos = await run_in_threadpool(repo.list)
        except StorageError as e:
            logger.error("Failed to read todos: %s", e)
            return PlainTextResponse("Failed to read todos", status_code=500)
        return JSONResponse([t.model_dump() for t in todos])

    @app.get("/todos/")
    async def get_todo(request: Request):
        """
        Return one todo selected by the ?id= query parameter.
        Errors are plain text on this endpoint.
        """
        await _observe(request)
        repo: TodoRepository = request.app.state.repository
        try:
            todo_id = _parse_id(request.query_params.get("id"))
        except ValidationError as e:
            return PlainTextResponse(str(e), status_code=400)
        try:
            todo = await run_in_threadpool(repo.get_by_id, todo_id)
        except NotFound:
            return PlainTextResponse("Todo not found", status_code=404)
        except StorageError as e:
            logger.error("Failed to fetch todo %s: %s", todo_id, e)
            return PlainTextResponse("Failed to read todo", status_code=500)
        return JSONResponse(todo.model_dump())

    @app.post("/todos")
    async def create_todo(request: Request):
        """
        Create a todo from a JSON body: { "title": "...", "completed": false }.
        "completed" is optional and defaults to false.
        """
        await _observe(request)
        repo: TodoRepository = request.app.state.repository
        try:
            data = await _read_json_object(request, "Invalid request body")
            title = _check_title(data, "Invalid title")
            completed = data.get("completed")
            completed = False if completed is None else _check_completed(completed)
        except ValidationError as e:
            return _error(str(e), 400)
        try:
            todo = await run_in_threadpool(repo.create, title, completed)
        except StorageError as e:
            logger.error("Failed to create todo: %s", e)
            return _error("Failed to create todo", 500)
        return JSONResponse(todo.model_dump())

    @app.put("/todos/")
    async def update_todo(request: Request):
        """
        Merge the JSON body over the todo selected by ?id=.
        Only fields present in the body change; "title" is always required.
        """
        await _observe(request)
        repo: TodoRepository = request.app.state.repository
        try:
            todo_id = _parse_id(request.query_params.get("id"))
            updates = await _read_json_object(request, "Invalid JSON")
            _check_title(updates, "Title is required")
            if "completed" in updates:
                _check_completed(updates["completed"])
        except ValidationError as e:
            return _error(str(e), 400)
        try:
            todo = await run_in_threadpool(repo.update, todo_id, updates)
        except NotFound:
            return _error("Todo not found", 404)
        except StorageError as e:
            logger.error("Failed to update todo %s: %s", todo_id, e)
            return _error("Failed to update todo", 500)
        return JSONResponse(todo.model_dump())

    @app.delete("/todos/")
    async def delete_todo(request: Request):
        """
        Remove the todo selected by ?id= and return it.
        """
        await _observe(request)
        repo: TodoRepository = request.app.state.repository
        try:
            todo_id = _parse_id(request.query_params.get("id"))
        except ValidationError as e:
            return _error(str(e), 400)
        try:
            removed = await run_in_threadpool(repo.delete, todo_id)
        except NotFound:
            return _error("Todo not found", 404)
        except StorageError as e:
            logger.error("Failed to delete todo %s: %s", todo_id, e)
            return _error("Failed to delete todo", 500)
        return JSONResponse(removed.model_dump())

    return app


_settings = load_settings()
setup_logging(_settings.log_level)
app = create_app(_settings)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=_settings.host, port=_settings.port)
