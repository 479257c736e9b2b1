"""Logging decorators for automatic function and operation tracking."""

from collections.abc import Callable
import functools
import time
from typing import ParamSpec, TypeVar

from .logger import get_logger

P = ParamSpec("P")
T = TypeVar("T")


def log_calls(
    logger_name: str | None = None,
    log_args: bool = True,
    log_result: bool = True,
    log_timing: bool = True,
    level: str = "DEBUG",
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """Decorator to log function calls with arguments, results, and timing.

    Exceptions are logged at ERROR and re-raised unchanged.

    Args:
        logger_name: Custom logger name, defaults to function's module
        log_args: Whether to log function arguments
        log_result: Whether to log function return value
        log_timing: Whether to log execution time
        level: Log level (DEBUG, INFO, WARNING, ERROR)

    Example:
        @log_calls()
        def aggregate(records):
            ...
    """

    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        logger = get_logger(logger_name or func.__module__)
        log_level = getattr(logger, level.lower())

        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            func_name = func.__name__

            args_str = ""
            if log_args and (args or kwargs):
                args_parts = [str(arg)[:100] for arg in args]
                args_parts.extend(f"{k}={str(v)[:100]}" for k, v in kwargs.items())
                args_str = f" with args: ({', '.join(args_parts)})"

            log_level(f"Calling {func_name}{args_str}")

            start_time = time.time()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                timing_str = ""
                if log_timing:
                    timing_str = f" (failed after {time.time() - start_time:.3f}s)"
                logger.error(f"Failed {func_name}{timing_str}: {type(e).__name__}: {e}")
                raise

            timing_str = ""
            if log_timing:
                timing_str = f" (took {time.time() - start_time:.3f}s)"

            result_str = ""
            if log_result:
                result_preview = str(result)[:200] if result is not None else "None"
                result_str = f" -> {result_preview}"

            log_level(f"Completed {func_name}{timing_str}{result_str}")
            return result

        return wrapper

    return decorator


def log_dataframe_operations(
    log_memory: bool = True,
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """Decorator for logging functions that build pandas DataFrames.

    Args:
        log_memory: Whether to log memory usage of the result

    Example:
        @log_dataframe_operations()
        def events_frame(self):
            return pd.DataFrame(rows)
    """

    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        logger = get_logger(func.__module__)

        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            func_name = func.__name__
            start_time = time.time()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                elapsed = time.time() - start_time
                logger.error(
                    f"Failed DataFrame operation: {func_name} ({elapsed:.3f}s): {e}"
                )
                raise

            elapsed = time.time() - start_time
            result_info = ""
            if hasattr(result, "shape"):
                result_info = f" -> {result.shape}"
                if log_memory and hasattr(result, "memory_usage"):
                    memory_mb = result.memory_usage(deep=True).sum() / 1024 / 1024
                    result_info += f" ({memory_mb:.2f}MB)"

            logger.debug(
                f"Completed DataFrame operation: {func_name} ({elapsed:.3f}s){result_info}"
            )
            return result

        return wrapper

    return decorator


def log_performance(
    warn_threshold: float = 1.0,
    error_threshold: float = 5.0,
    memory_tracking: bool = False,
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """Decorator for performance monitoring with configurable thresholds.

    Args:
        warn_threshold: Seconds after which to log a warning
        error_threshold: Seconds after which to log an error
        memory_tracking: Whether to track memory usage (requires psutil)

    Example:
        @log_performance(warn_threshold=0.5, error_threshold=2.0)
        def run(self, records):
            ...
    """

    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        logger = get_logger(func.__module__)

        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            func_name = func.__name__

            process = None
            start_memory = None
            if memory_tracking:
                import psutil

                process = psutil.Process()
                start_memory = process.memory_info().rss / 1024 / 1024

            start_time = time.time()
            try:
                result = func(*args, **kwargs)
            except Exception:
                # The failure itself is logged at ERROR by the code that raised it
                logger.debug(
                    f"Performance: {func_name} failed after {time.time() - start_time:.3f}s"
                )
                raise

            elapsed = time.time() - start_time

            memory_str = ""
            if process is not None:
                memory_diff = process.memory_info().rss / 1024 / 1024 - start_memory
                memory_str = f" (memory: {memory_diff:+.1f}MB)"

            message = f"Performance: {func_name} completed in {elapsed:.3f}s{memory_str}"

            if elapsed >= error_threshold:
                logger.error(f"SLOW PERFORMANCE: {message}")
            elif elapsed >= warn_threshold:
                logger.warning(f"PERFORMANCE WARNING: {message}")
            else:
                logger.debug(message)

            return result

        return wrapper

    return decorator


class LoggerMixin:
    """Mixin class that provides logging capabilities to any class.

    Automatically creates a logger based on the class name.

    Example:
        class SameDayRule(LoggerMixin, MatchingRule):
            def process(self, state):
                self.logger.debug("Matching same day disposals")
    """

    def __init__(self, *args, **kwargs):
        """Initialize the mixin and set up the logger."""
        super().__init__(*args, **kwargs)
        self.logger = get_logger(
            f"{self.__class__.__module__}.{self.__class__.__name__}"
        )

    def log_operation_start(self, operation: str, details: str = ""):
        """Log the start of an operation."""
        details_str = f": {details}" if details else ""
        self.logger.debug(f"Starting {operation}{details_str}")

    def log_operation_success(
        self, operation: str, duration: float | None = None, details: str = ""
    ):
        """Log successful completion of an operation."""
        timing_str = f" ({duration:.3f}s)" if duration else ""
        details_str = f": {details}" if details else ""
        self.logger.debug(f"Completed {operation}{timing_str}{details_str}")

    def log_operation_error(
        self, operation: str, error: Exception, duration: float | None = None
    ):
        """Log operation failure."""
        timing_str = f" ({duration:.3f}s)" if duration else ""
        self.logger.error(
            f"Failed {operation}{timing_str}: {type(error).__name__}: {error}"
        )
