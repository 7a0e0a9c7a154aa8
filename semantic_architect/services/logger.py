"""Loguru sinks plus structured records for runs and outbound API calls.

Every record carries a ``run_id`` extra so lines from concurrent
generations can be told apart; records outside a run show ``-``.
"""

import logging
import sys
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from semantic_architect.config import settings

LOG_DIR = Path("logs")
LOG_DIR.mkdir(exist_ok=True)

NO_RUN = "-"

logger.remove()
logger.configure(extra={"run_id": NO_RUN})

logger.add(
    sys.stderr,
    format=(
        "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
        "<magenta>{extra[run_id]}</magenta> | <cyan>{name}</cyan> - <level>{message}</level>"
    ),
    level=settings.app_log_level.upper(),
    colorize=True,
)

logger.add(
    LOG_DIR / "semantic_architect_{time:YYYY-MM-DD}.log",
    format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | run={extra[run_id]} | {name}:{function}:{line} - {message}",
    level="DEBUG",
    rotation="00:00",
    retention="7 days",
    compression="zip",
)

# SSE keep-alives and per-request HTTP lines drown out run records
for logger_name in (
    "uvicorn.access",
    "sse_starlette.sse",
    "httpx",
    "httpcore",
    "openai._base_client",
):
    logging.getLogger(logger_name).setLevel(settings.noisy_log_level.upper())


def run_logger(run_id: Optional[str] = None):
    """Logger bound to one generation run."""
    return logger.bind(run_id=run_id or NO_RUN)


def _record(fields: dict[str, Any]) -> str:
    return " ".join(f"{key}={value}" for key, value in fields.items() if value is not None)


def log_llm_call(
    model: str,
    caller: str,
    input_tokens: int = 0,
    output_tokens: int = 0,
    duration_ms: int = 0,
    status: str = "success",
    error: Optional[str] = None,
    run_id: Optional[str] = None,
) -> None:
    """Log one OpenRouter completion with its token usage."""
    line = _record(
        {
            "model": model,
            "caller": caller,
            "tokens": f"{input_tokens}+{output_tokens}",
            "duration_ms": duration_ms,
            "status": status,
            "error": error,
        }
    )
    if error:
        run_logger(run_id).error(f"LLM_CALL_FAILED {line}")
    else:
        run_logger(run_id).debug(f"LLM_CALL {line}")


def log_provider_call(
    provider: str,
    operation: str,
    duration_ms: int = 0,
    status: str = "success",
    error: Optional[str] = None,
    run_id: Optional[str] = None,
) -> None:
    """Log one SerpData or Jina request; failures are warnings since runs continue past them."""
    line = _record(
        {
            "provider": provider,
            "operation": operation,
            "duration_ms": duration_ms,
            "status": status,
            "error": error,
        }
    )
    if error:
        run_logger(run_id).warning(f"PROVIDER_CALL_FAILED {line}")
    else:
        run_logger(run_id).debug(f"PROVIDER_CALL {line}")


def log_event(
    event_type: str,
    message: str,
    run_id: Optional[str] = None,
    **fields: Any,
) -> None:
    """Log a run lifecycle event such as start, finish, or stream failure."""
    details = _record(fields)
    suffix = f" ({details})" if details else ""
    run_logger(run_id).info(f"EVENT {event_type}: {message}{suffix}")
