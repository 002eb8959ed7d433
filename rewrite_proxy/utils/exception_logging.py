"""
Exception logging helpers for the proxy fault handler.

Faults are logged from inside the catch-all handler, so these helpers must
never raise themselves, even for exceptions with a broken ``__str__`` or for
exception groups raised by anyio task groups.
"""

import logging


def _safe_str(obj) -> str:
    """
    Convert an object to string, falling back to repr and then to the type name.

    Args:
        obj: The object to convert to string

    Returns:
        A string representation of the object
    """
    try:
        return str(obj)
    except Exception:
        try:
            return repr(obj)
        except Exception:
            return f"<{type(obj).__name__} object (string conversion failed)>"


def _safe_get_exceptions(exception_group) -> list:
    try:
        return list(exception_group.exceptions)
    except Exception:
        return []


def format_exception_message(exception: Exception) -> str:
    """
    Format an exception as ``Type: message``, flattening exception groups.

    Args:
        exception: The exception to format

    Returns:
        A one-line description of the exception
    """
    try:
        if exception is None:
            return "None"

        sub_exceptions = (
            _safe_get_exceptions(exception) if hasattr(exception, "exceptions") else []
        )
        main = f"{type(exception).__name__}: {_safe_str(exception)}"
        if not sub_exceptions:
            return main

        parts = [
            f"{type(sub_exc).__name__}: {_safe_str(sub_exc)}" for sub_exc in sub_exceptions
        ]
        return f"{main} (Sub-exceptions: {'; '.join(parts)})"
    except Exception:
        return "<exception (formatting failed)>"


def log_exception_with_details(
    logger: logging.Logger,
    prefix: str,
    exception: Exception,
    context: str = "",
    level: int = logging.ERROR,
) -> None:
    """
    Log an exception together with the request it happened in.

    Each sub-exception of an exception group is logged on its own line with
    its traceback. This function never raises.

    Args:
        logger: The logger instance to use
        prefix: Prefix for the log message (e.g., "[Proxy]")
        exception: The exception to log
        context: Request description appended to every line
        level: The logging level to use (default: ERROR)
    """
    try:
        suffix = f", {context}" if context else ""
        sub_exceptions = (
            _safe_get_exceptions(exception)
            if exception is not None and hasattr(exception, "exceptions")
            else []
        )

        if not sub_exceptions:
            logger.log(
                level,
                f"{prefix} Request failed: {format_exception_message(exception)}{suffix}",
                exc_info=exception if exception is not None else False,
            )
            return

        logger.log(
            level,
            f"{prefix} Request failed with {len(sub_exceptions)} sub-exceptions: "
            f"{_safe_str(exception)}{suffix}",
        )
        for i, sub_exc in enumerate(sub_exceptions):
            logger.log(
                level,
                f"{prefix} Sub-exception {i + 1}: {format_exception_message(sub_exc)}",
                exc_info=sub_exc,
            )
    except Exception:
        try:
            logger.log(logging.ERROR, f"{prefix} Exception logging failed")
        except Exception:
            # Logging itself is broken, nothing left to report to
            pass
