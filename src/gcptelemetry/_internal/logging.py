"""Internal logging utilities."""

import logging

# Create package logger
logger = logging.getLogger("gcptelemetry")

# Default to WARNING to avoid noise
logger.setLevel(logging.WARNING)


def log_internal_error(operation: str, error: Exception) -> None:
    """Log an error swallowed at the exporter boundary without raising."""
    logger.warning(f"gcptelemetry error in {operation}: {error}", exc_info=True)
