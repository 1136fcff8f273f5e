import os
import sys
import time
from functools import wraps

from loguru import logger


def setup_logging() -> None:
    from plan_todos.config import settings

    log_dir = os.path.dirname(settings.log_path)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    logger.remove()
    logger.add(sys.stdout, level=settings.log_level)
    logger.add(settings.log_path, rotation="10 MB", level=settings.log_level)


def log_operation(name: str):
    """Log duration and outcome of a top-level engine operation."""

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as exc:
                elapsed = int((time.perf_counter() - start) * 1000)
                logger.info("[engine] {} - {}ms - err: {}", name, elapsed, exc)
                raise
            elapsed = int((time.perf_counter() - start) * 1000)
            logger.info("[engine] {} - {}ms - ok", name, elapsed)
            return result

        return wrapper

    return decorator
