"""
Logging configuration for the DocAI document chat service
"""
import logging
import logging.handlers
import sys
import os
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
from config import settings


_STANDARD_RECORD_ATTRS = {
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname',
    'filename', 'module', 'lineno', 'funcName', 'created',
    'msecs', 'relativeCreated', 'thread', 'threadName',
    'processName', 'process', 'getMessage', 'exc_info', 'exc_text',
    'stack_info', 'taskName'
}


class StructuredFormatter(logging.Formatter):
    """
    Custom formatter that outputs structured JSON logs for better parsing
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured JSON"""
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno
        }

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info)
            }

        extra_fields = {
            key: value for key, value in record.__dict__.items()
            if key not in _STANDARD_RECORD_ATTRS
        }

        if extra_fields:
            log_entry["extra"] = extra_fields

        return json.dumps(log_entry, default=str)


class ContextFilter(logging.Filter):
    """
    Filter that adds contextual information to log records
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """Add context information to log record"""
        record.service = "docai-chat"
        record.version = settings.app_version
        record.pid = os.getpid()

        return True


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    log_file: Optional[str] = None,
    max_file_size: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5
) -> logging.Logger:
    """
    Configure application logging

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Format type ("structured" for JSON, "simple" for text)
        log_file: Optional file path for file logging
        max_file_size: Maximum size of log files before rotation
        backup_count: Number of backup files to keep

    Returns:
        Configured root logger
    """
    log_level = log_level or settings.log_level
    log_format = log_format or settings.log_format
    log_file = log_file or settings.log_file

    level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if log_format == "structured":
        formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(service)s - %(name)s - %(levelname)s - %(message)s - '
            '[%(module)s:%(funcName)s:%(lineno)d] [PID:%(pid)d]'
        )

    context_filter = ContextFilter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(context_filter)
    console_handler.setLevel(level)
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_file,
            maxBytes=max_file_size,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        file_handler.addFilter(context_filter)
        file_handler.setLevel(level)
        root_logger.addHandler(file_handler)

    configure_service_loggers(level)

    root_logger.info(
        "Logging configured",
        extra={
            "log_level": log_level,
            "log_format": log_format,
            "log_file": log_file,
            "handlers": len(root_logger.handlers)
        }
    )

    return root_logger


def configure_service_loggers(level: int):
    """Configure logging for specific services and libraries"""

    # AWS SDK and HTTP client libraries are chatty at INFO
    logging.getLogger("boto3").setLevel(logging.WARNING)
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("s3transfer").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    service_loggers = [
        "services.object_store",
        "services.gemini_client",
        "services.extraction_service",
        "services.answer_service",
        "services.pdf_processor",
        "services.document_service",
        "services.session_manager",
        "services.chat_service",
        "api.chat_controller",
        "api.session_controller"
    ]

    for logger_name in service_loggers:
        logging.getLogger(logger_name).setLevel(level)


def log_api_request(
    method: str,
    path: str,
    status_code: int,
    duration_ms: int,
    request_id: Optional[str] = None,
    user_agent: Optional[str] = None,
    client_ip: Optional[str] = None
):
    """
    Log API request information

    Args:
        method: HTTP method
        path: Request path
        status_code: HTTP status code
        duration_ms: Request duration in milliseconds
        request_id: Identifier echoed in the X-Request-ID header
        user_agent: User agent string
        client_ip: Client IP address
    """
    logger = logging.getLogger("api")

    extra = {
        "method": method,
        "path": path,
        "status_code": status_code,
        "duration_ms": duration_ms,
        "request_id": request_id,
        "user_agent": user_agent,
        "client_ip": client_ip
    }

    if status_code >= 500:
        logger.error(f"API request failed: {method} {path}", extra=extra)
    elif status_code >= 400:
        logger.warning(f"API request error: {method} {path}", extra=extra)
    else:
        logger.info(f"API request: {method} {path}", extra=extra)
