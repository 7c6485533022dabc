"""Structured JSON logging configuration with per-flow correlation IDs.

Every user-triggered flow (expand, find_path, load_cluster, ...) calls
generate_flow_id() before it logs anything, so all records emitted while the
flow awaits its fetch and merges the result share one flow_id and flow name.
"""

import logging
import sys
from contextvars import ContextVar
from typing import Optional
from uuid import uuid4

from pythonjsonlogger.json import JsonFormatter


# Current flow; ContextVars follow the task across awaits
flow_id: ContextVar[Optional[str]] = ContextVar("flow_id", default=None)
flow_name: ContextVar[Optional[str]] = ContextVar("flow_name", default=None)


def generate_flow_id(flow: Optional[str] = None) -> str:
    """Start a new flow: set a fresh flow ID (and the flow name) in the context."""
    new_id = str(uuid4())
    flow_id.set(new_id)
    flow_name.set(flow)
    return new_id


class FlowContextFilter(logging.Filter):
    """Copy the current flow onto each record so text formats can show it."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.flow = flow_name.get() or "-"
        record.flow_id = flow_id.get() or "-"
        return True


class JSONFormatter(JsonFormatter):
    """JSON formatter that tags records with the running flow."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)

        current = flow_id.get()
        if current:
            log_record['flow_id'] = current
            log_record['flow'] = flow_name.get()
        else:
            # Record may carry "-" placeholders from FlowContextFilter
            log_record.pop('flow_id', None)
            log_record.pop('flow', None)

        log_record['timestamp'] = self.formatTime(record, self.datefmt)
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['module'] = record.module
        log_record['function'] = record.funcName
        log_record['line'] = record.lineno

        if record.exc_info:
            log_record['exception'] = self.formatException(record.exc_info)


def configure_logging(
    log_level: str = "INFO",
    log_format: str = "text",
    module_levels: Optional[dict[str, str]] = None
) -> None:
    """
    Configure explorer logging with JSON or text format.

    Args:
        log_level: Default log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: "json" for structured JSON logs, "text" for human-readable
        module_levels: Optional dict of module-specific log levels {"legis_explorer.graph.store": "DEBUG"}
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, log_level.upper()))

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.addFilter(FlowContextFilter())

    if log_format.lower() == "json":
        formatter = JSONFormatter(
            fmt='%(timestamp)s %(level)s %(name)s %(message)s',
            datefmt='%Y-%m-%dT%H:%M:%S'
        )
    else:
        formatter = logging.Formatter(
            fmt='%(asctime)s [%(name)s] %(levelname)s (%(flow)s): %(message)s',
            datefmt='%H:%M:%S'
        )

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if module_levels:
        for module_name, level in module_levels.items():
            logging.getLogger(module_name).setLevel(getattr(logging, level.upper()))

    logger = logging.getLogger(__name__)
    logger.info(
        "Logging configured",
        extra={
            "log_level": log_level,
            "log_format": log_format,
            "module_levels": module_levels or {}
        }
    )
