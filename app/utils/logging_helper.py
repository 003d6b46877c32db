import json
import logging
import uuid
from flask import g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"


def get_request_id() -> str:
    if not has_request_context():
        return ""
    return getattr(g, "request_id", "")


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        data = {
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "request_id": get_request_id(),
        }
        if has_request_context():
            data["path"] = request.path
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data)


def setup_json_logging(level: str = "INFO") -> None:
    lvl = getattr(logging, (level or "INFO").upper(), logging.INFO)
    root = logging.getLogger()
    root.handlers.clear()
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)
    root.setLevel(lvl)


def init_request_id(app) -> None:
    """Tag every request with an id, reusing the caller's X-Request-ID when sent."""

    @app.before_request
    def _assign_request_id():
        g.request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex

    @app.after_request
    def _echo_request_id(response):
        rid = getattr(g, "request_id", None)
        if rid:
            response.headers.setdefault(REQUEST_ID_HEADER, rid)
        return response
