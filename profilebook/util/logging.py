"""
Structured logging for profile, ledger, asset and storage operations.
"""

import logging
from typing import Any, Dict, List

# Keys whose values are never written to logs verbatim
SENSITIVE_FIELDS = ['value', 'data', 'payload', 'content', 'uploadedImages', 'photos']


class StructuredLogger:
    """Structured logger for profile core operations."""

    def __init__(self, name: str = "profilebook"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.INFO)

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def log_operation(self, operation: str, status: str, details: Dict[str, Any] = None):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            # Data URLs and long error texts are shortened before they hit the log
            message += f", Details: {sanitize_payload(details, reveal_sensitive=True)}"

        if status in ("failed", "error"):
            self.logger.error(message)
        else:
            self.logger.info(message)

    def log_profile_operation(self, operation: str, identity: str = None, status: str = "success", details: Dict[str, Any] = None):
        """Log a Profile Store operation."""
        log_details = {"identity": identity or "anonymous"}
        if details:
            log_details.update(details)

        self.log_operation(f"profile.{operation}", status, log_details)

    def log_ledger_operation(self, operation: str, identity: str = None, size: int = None, status: str = "success"):
        """Log a Connection Ledger operation."""
        log_details = {"identity": identity or "structural"}
        if size is not None:
            log_details["size"] = size

        self.log_operation(f"ledger.{operation}", status, log_details)

    def log_asset_operation(self, operation: str, name: str, size: int = None, status: str = "success", error: str = None):
        """Log a binary asset operation."""
        log_details = {"name": name}
        if size is not None:
            log_details["size"] = size
        if error:
            log_details["error"] = error[:100]

        self.log_operation(f"asset.{operation}", status, log_details)

    def log_storage_operation(self, operation: str, key: str, size: int = None, status: str = "success", details: Dict[str, Any] = None):
        """Log a key-value storage operation."""
        log_details = {"key": key}
        if size is not None:
            log_details["size"] = size
        if details:
            log_details.update(details)

        self.log_operation(f"storage.{operation}", status, log_details)

    # Standard logging methods for compatibility
    def info(self, message: str) -> None:
        """Log an info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """Log an error message."""
        self.logger.error(message)

    def debug(self, message: str) -> None:
        """Log a debug message."""
        self.logger.debug(message)


# Global logger instance
logger = StructuredLogger()


def audit_event(event_type: str, identifiers: Dict[str, Any], payload: Dict[str, Any] = None, sensitive_fields: List[str] = None):
    """General audit event logging with payload sanitization."""
    if sensitive_fields is None:
        sensitive_fields = SENSITIVE_FIELDS

    log_details = identifiers.copy() if identifiers else {}

    if payload:
        log_details["payload"] = sanitize_payload(payload, sensitive_fields=sensitive_fields)

    logger.log_operation(event_type.replace(".", "_"), "audit", log_details)


def sanitize_payload(payload: Any, reveal_sensitive: bool = False, sensitive_fields: List[str] = None) -> Any:
    """Sanitize payloads for logging; data URLs and long strings are truncated."""
    if sensitive_fields is None:
        sensitive_fields = SENSITIVE_FIELDS

    if isinstance(payload, dict):
        sanitized = {}
        for k, v in payload.items():
            if reveal_sensitive or k not in sensitive_fields:
                sanitized[k] = sanitize_payload(v, reveal_sensitive, sensitive_fields)
            else:
                sanitized[k] = "[REDACTED]"
        return sanitized
    elif isinstance(payload, str):
        if payload.startswith("data:"):
            return payload.split(",", 1)[0] + ",..."
        return payload[:100] + "..." if len(payload) > 100 else payload
    elif isinstance(payload, (list, tuple)):
        return [sanitize_payload(item, reveal_sensitive, sensitive_fields) for item in payload]
    else:
        return payload
