"""Настройка логирования приложения"""
import json
import logging
import re
import sys
import time
from datetime import datetime, timezone

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

request_logger = logging.getLogger("doclocker.requests")

# Длинные hex-сегменты пути (токены ссылок) не попадают в лог целиком
SECRET_SEGMENT = re.compile(r"(?<=/)([0-9a-fA-F]{8})[0-9a-fA-F]{24,}")


def loggable_path(request: Request) -> str:
    """Шаблон маршрута, если он найден, иначе путь с замаскированными токенами"""
    route = request.scope.get("route")
    template = getattr(route, "path", None)
    if template:
        return template
    return SECRET_SEGMENT.sub(r"\1...", request.url.path)


class JSONFormatter(logging.Formatter):
    """Форматирование записей лога в JSON"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_data["error"] = str(record.exc_info[1])
            log_data["traceback"] = self.formatException(record.exc_info)
        return json.dumps(log_data)


def configure_logging(level: str = "INFO", json_format: bool = False) -> None:
    """Настройка корневого логгера"""
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s - %(levelname)s - %(name)s - %(message)s"))
    root_logger.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Логирование каждого HTTP-запроса"""

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = int((time.perf_counter() - started) * 1000)
        request_logger.info(f"{request.method} {loggable_path(request)} -> {response.status_code} ({duration_ms} ms)")
        return response
