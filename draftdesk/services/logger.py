"""Centralized logging service using loguru."""

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from loguru import logger

from draftdesk.config import settings

# Remove default handler
logger.remove()

# Add console handler with color
logger.add(
    sys.stderr,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
    level=settings.app_log_level.upper(),
    colorize=True,
)

if settings.log_to_file:
    LOG_DIR = Path(settings.log_dir)
    LOG_DIR.mkdir(parents=True, exist_ok=True)

    # Add file handler
    logger.add(
        LOG_DIR / "draftdesk_{time:YYYY-MM-DD}.log",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        level="DEBUG",
        rotation="00:00",  # New file at midnight
        retention="7 days",
        compression="zip",
    )

# Reduce noise from framework/network libraries
for logger_name in (
    "uvicorn",
    "uvicorn.error",
    "uvicorn.access",
    "fastapi",
    "httpx",
    "httpcore",
    "hpack",
    "asyncio",
):
    logging.getLogger(logger_name).setLevel(settings.noisy_log_level.upper())


def log_provider_attempt(
    provider: str,
    query: str,
    status: str,
    results_count: int = 0,
    duration_ms: int = 0,
    error: Optional[str] = None,
) -> None:
    """Log one search provider attempt."""
    attempt_data = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "provider": provider,
        "query": query[:100],
        "status": status,
        "results_count": results_count,
        "duration_ms": duration_ms,
        "error": error,
    }
    if error:
        logger.warning(f"PROVIDER_ATTEMPT_FAILED: {attempt_data}")
    else:
        logger.info(f"PROVIDER_ATTEMPT: {attempt_data}")


def log_pipeline_step(
    topic: str,
    agent: str,
    status: str,
    duration_ms: int = 0,
    error: Optional[str] = None,
) -> None:
    """Log a pipeline step transition."""
    step_data = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "topic": topic[:100],
        "agent": agent,
        "status": status,
        "duration_ms": duration_ms,
        "error": error,
    }
    if status == "failed":
        logger.error(f"PIPELINE_STEP_FAILED: {step_data}")
    else:
        logger.info(f"PIPELINE_STEP: {step_data}")


def log_event(
    event_type: str,
    message: str,
    **kwargs,
) -> None:
    """Log a generic event."""
    event_data = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "event_type": event_type,
        "message": message,
        **kwargs,
    }
    logger.info(f"EVENT: {event_data}")
