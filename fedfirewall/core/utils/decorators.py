import time
import logging
import functools
import inspect
from typing import Callable, Any

logger = logging.getLogger(__name__)


def _get_function_name(func: Callable, args: tuple = ()) -> str:
    """
    Get the qualified name of a function.

    For methods, uses the class of the instance at runtime so adapters that
    inherit a decorated method are logged under their own name.
    """
    if args:
        instance = args[0]
        if inspect.isclass(instance):
            return f"{instance.__name__}.{func.__name__}"
        if hasattr(instance, func.__name__):
            return f"{instance.__class__.__name__}.{func.__name__}"
    return func.__qualname__


def _elapsed(start_time: float, unit: str) -> float:
    elapsed = time.perf_counter() - start_time
    return elapsed * 1000 if unit == "ms" else elapsed


def log_execution_time(log_level: str = "info", unit: str = "ms") -> Callable:
    """
    Decorator to measure and log the execution time.

    Args:
        log_level: Log level ("debug", "info", "warning", "error")
        unit: Time unit ("ms" for milliseconds, "s" for seconds)
    """
    def decorator(func: Callable) -> Callable:

        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            start_time = time.perf_counter()
            func_name = _get_function_name(func, args)
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                logger.error(f"{func_name} failed after {_elapsed(start_time, unit):.2f}{unit}: {e}")
                raise
            getattr(logger, log_level)(f"{func_name} executed in {_elapsed(start_time, unit):.2f}{unit}")
            return result

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            start_time = time.perf_counter()
            func_name = _get_function_name(func, args)
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.error(f"{func_name} failed after {_elapsed(start_time, unit):.2f}{unit}: {e}")
                raise
            getattr(logger, log_level)(f"{func_name} executed in {_elapsed(start_time, unit):.2f}{unit}")
            return result

        return async_wrapper if inspect.iscoroutinefunction(func) else sync_wrapper

    return decorator
