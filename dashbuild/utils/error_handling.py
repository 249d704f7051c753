"""
Error Handling Utility Module

Shared logging for failures the run survives: a failed area, an
unreachable endpoint, an unreadable cache file. Every such failure is
logged with the same structured fields so it can be filtered in JSON logs.
"""

import logging
from typing import Any


def _error_extra(error: BaseException, context: dict[str, Any], error_type: str) -> dict[str, Any]:
    return {
        "error_type": error_type,
        "exception_class": type(error).__name__,
        "context": context,
    }


def log_and_continue(
    logger: logging.Logger,
    error: BaseException,
    context: dict[str, Any],
    error_type: str = "Operation",
) -> None:
    """
    Log a survivable failure as a warning.

    Args:
        logger: Module logger
        error: The caught exception
        context: What was being worked on (area, path, ...)
        error_type: Human-readable name of the failed operation

    Example:
        except Exception as e:
            log_and_continue(logger, e, context={"area": "prs"}, error_type="Fetching area 'prs'")
    """
    logger.warning(f"{error_type} failed: {error}", extra=_error_extra(error, context, error_type))


def log_and_return_default(
    logger: logging.Logger,
    error: BaseException,
    context: dict[str, Any],
    default_value: Any = None,
    error_type: str = "Operation",
    level: int = logging.WARNING,
) -> Any:
    """
    Log a failure and hand back a fallback value.

    Expected conditions (a cache file that does not exist yet) can pass
    level=logging.INFO.

    Example:
        except json.JSONDecodeError as e:
            return log_and_return_default(logger, e, {"path": str(path)}, default_value={})
    """
    extra = _error_extra(error, context, error_type)
    extra["default_value"] = repr(default_value)
    logger.log(level, f"{error_type} failed, using {default_value!r}: {error}", extra=extra)
    return default_value
