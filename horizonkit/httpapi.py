"""WSGI applications exposing a command handler and a read repository over HTTP."""

from __future__ import annotations

import dataclasses
import json
import uuid
from collections.abc import Callable, Iterable
from datetime import date, datetime
from http import HTTPStatus
from typing import Any

from horizonkit.eventing import EntityNotFoundError

StartResponse = Callable[..., Any]
WSGIApp = Callable[[dict, StartResponse], Iterable[bytes]]


def _status_line(status: HTTPStatus) -> str:
    return f"{status.value} {status.phrase}"


def _error(start_response: StartResponse, status: HTTPStatus, message: str) -> list[bytes]:
    body = (message + "\n").encode("utf-8")
    start_response(
        _status_line(status),
        [
            ("Content-Type", "text/plain; charset=utf-8"),
            ("X-Content-Type-Options", "nosniff"),
            ("Content-Length", str(len(body))),
        ],
    )
    return [body]


def _read_body(environ: dict) -> bytes:
    length_text = environ.get("CONTENT_LENGTH") or "0"
    length = int(length_text)
    if length <= 0:
        return b""
    return environ["wsgi.input"].read(length)


def command_app(handler: Any, command_factory: Callable[[dict], Any]) -> WSGIApp:
    """Return a WSGI app that accepts a POSTed JSON object as a command.

    The decoded object is passed to ``command_factory`` and the resulting
    command to ``handler.handle_command``.
    """

    def app(environ: dict, start_response: StartResponse) -> list[bytes]:
        method = environ.get("REQUEST_METHOD", "GET")
        if method != "POST":
            return _error(start_response, HTTPStatus.METHOD_NOT_ALLOWED, f"unsupported method: {method}")

        try:
            body = _read_body(environ)
        except (OSError, ValueError) as exc:
            return _error(start_response, HTTPStatus.BAD_REQUEST, f"could not read command: {exc}")

        try:
            payload = json.loads(body)
        except ValueError as exc:
            return _error(start_response, HTTPStatus.BAD_REQUEST, f"could not decode command: {exc}")
        if not isinstance(payload, dict):
            return _error(
                start_response,
                HTTPStatus.BAD_REQUEST,
                f"could not decode command: expected a JSON object, got {type(payload).__name__}",
            )

        try:
            command = command_factory(payload)
        except Exception as exc:
            return _error(start_response, HTTPStatus.BAD_REQUEST, f"could not create command: {exc}")

        try:
            handler.handle_command(command)
        except Exception as exc:
            return _error(start_response, HTTPStatus.BAD_REQUEST, f"could not handle command: {exc}")

        start_response(_status_line(HTTPStatus.OK), [("Content-Length", "0")])
        return [b""]

    return app


def _to_jsonable(obj: Any) -> Any:
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: getattr(obj, f.name) for f in dataclasses.fields(obj)}
    if isinstance(obj, uuid.UUID):
        return str(obj)
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    raise TypeError(f"object of type {type(obj).__name__} is not JSON serializable")


def query_app(repo: Any) -> WSGIApp:
    """Return a WSGI app serving one or all entities of a read repository.

    A path ending in ``/`` lists everything; otherwise the last path segment
    is parsed as the ID of a single entity.
    """

    def app(environ: dict, start_response: StartResponse) -> list[bytes]:
        method = environ.get("REQUEST_METHOD", "GET")
        if method != "GET":
            return _error(start_response, HTTPStatus.METHOD_NOT_ALLOWED, f"unsupported method: {method}")

        id_text = environ.get("PATH_INFO", "").rpartition("/")[2]
        if not id_text:
            try:
                data = repo.find_all()
            except Exception as exc:
                return _error(start_response, HTTPStatus.INTERNAL_SERVER_ERROR, f"could not find items: {exc}")
        else:
            try:
                entity_id = uuid.UUID(id_text)
            except ValueError as exc:
                return _error(start_response, HTTPStatus.BAD_REQUEST, f"could not parse ID: {exc}")
            try:
                data = repo.find(entity_id)
            except EntityNotFoundError:
                return _error(start_response, HTTPStatus.NOT_FOUND, "could not find item")
            except Exception as exc:
                return _error(start_response, HTTPStatus.INTERNAL_SERVER_ERROR, f"could not find item: {exc}")

        try:
            body = json.dumps(data, default=_to_jsonable, separators=(",", ":")).encode("utf-8")
        except (TypeError, ValueError) as exc:
            return _error(start_response, HTTPStatus.INTERNAL_SERVER_ERROR, f"could not encode result: {exc}")

        start_response(
            _status_line(HTTPStatus.OK),
            [("Content-Type", "application/json"), ("Content-Length", str(len(body)))],
        )
        return [body]

    return app