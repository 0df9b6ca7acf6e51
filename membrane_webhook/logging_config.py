from __future__ import annotations

import logging

from pythonjsonlogger.json import JsonFormatter

_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
_FIELDS = ("asctime", "levelname", "name", "message")
_RENAME = {"levelname": "level", "name": "logger"}

class ServiceFilter(logging.Filter):
    def __init__(self, service_name: str) -> None:
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self.service_name
        return True

class ServiceHandler(logging.StreamHandler):
    pass

def configure_logging(level: str = "INFO", service_name: str = "membrane-webhook") -> None:
    level = level.upper()
    if level not in _LEVELS:
        raise ValueError(f"invalid log level: {level}")

    formatter = JsonFormatter(
        " ".join(f"%({f})s" for f in _FIELDS),
        rename_fields=_RENAME,
    )

    handler = ServiceHandler()
    handler.setFormatter(formatter)
    handler.addFilter(ServiceFilter(service_name))

    root = logging.getLogger()
    root.setLevel(level)
    # swap our own handler only, other handlers (pytest, uvicorn) stay
    root.handlers = [h for h in root.handlers if not isinstance(h, ServiceHandler)]
    root.addHandler(handler)
