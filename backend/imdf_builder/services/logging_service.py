"""
Logging service for structured logging with correlation IDs.
"""

import logging
import sys
import structlog
from typing import Optional
from ..config import settings

class LoggingService:
    """Service for structured logging."""

    def __init__(self):
        # Route stdlib logging to stderr at the configured level
        logging.basicConfig(
            level=getattr(logging, (settings.log_level or "INFO").upper(), logging.INFO),
            format="%(message)s",
            stream=sys.stderr,
        )

        # Configure structured logging
        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.stdlib.PositionalArgumentsFormatter(),
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.UnicodeDecoder(),
                structlog.processors.JSONRenderer()
            ],
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

        self.logger = structlog.get_logger()

    def get_logger_with_context(self, **context) -> structlog.BoundLogger:
        """Get a logger bound with specific context."""
        return self.logger.bind(**context)

    def log_api_request(self, request_id: str, method: str, path: str,
                       user_agent: Optional[str] = None,
                       ip_address: Optional[str] = None):
        """Log API request with correlation ID."""
        self.logger.info(
            "API request",
            request_id=request_id,
            method=method,
            path=path,
            user_agent=user_agent,
            ip_address=ip_address
        )

    def log_api_response(self, request_id: str, status_code: int,
                        duration_ms: int, response_size: Optional[int] = None):
        """Log API response with timing metrics."""
        self.logger.info(
            "API response",
            request_id=request_id,
            status_code=status_code,
            duration_ms=duration_ms,
            response_size=response_size
        )

    def log_database_operation(self, operation: str, table: str,
                              record_id: Optional[str] = None,
                              duration_ms: Optional[int] = None,
                              error: Optional[str] = None):
        """Log database operations for monitoring."""
        log_data = {
            'operation': operation,
            'table': table
        }

        if record_id:
            log_data['record_id'] = record_id
        if duration_ms:
            log_data['duration_ms'] = duration_ms

        if error:
            log_data['error'] = error
            self.logger.error("Database operation failed", **log_data)
        else:
            self.logger.debug("Database operation", **log_data)

    def log_file_operation(self, operation: str, file_path: str,
                          file_size: Optional[int] = None,
                          duration_ms: Optional[int] = None,
                          error: Optional[str] = None):
        """Log file operations for monitoring."""
        log_data = {
            'operation': operation,
            'file_path': file_path
        }

        if file_size:
            log_data['file_size'] = file_size
        if duration_ms:
            log_data['duration_ms'] = duration_ms

        if error:
            log_data['error'] = error
            self.logger.error("File operation failed", **log_data)
        else:
            self.logger.info("File operation", **log_data)

# Global logging service instance
logging_service = LoggingService()
