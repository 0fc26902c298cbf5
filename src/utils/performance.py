"""Performance monitoring utilities.

``monitor_performance`` times a function, keeps per-function call metrics
and logs slow or failing calls. Non-recoverable ``SearchError``s are client
rejections: they log at WARNING and do not count towards the error rate.
Exceptions are always re-raised unchanged.
"""

import functools
import logging
import threading
import time
from datetime import datetime
from typing import Any, Callable, Dict, Optional

import pandas as pd
import psutil

from src.utils.errors import SearchError

# Use a module-level logger; avoid configuring logging at import time
perf_logger = logging.getLogger(__name__)

_performance_metrics: Dict[str, Dict[str, Any]] = {}
_metrics_lock = threading.Lock()


def monitor_performance(slow_threshold: float = 1.0, log_memory: bool = False):
    """
    Decorator to monitor function performance and log slow operations.

    Args:
        slow_threshold (float): Threshold in seconds above which to log as slow
        log_memory (bool): Whether to log memory usage

    Returns:
        Callable: Decorated function with performance monitoring

    Example:
        @monitor_performance(slow_threshold=0.5)
        def search_vendors(store, params):
            ...
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            func_name = f"{func.__module__}.{func.__name__}"
            start_time = time.perf_counter()
            start_memory = psutil.Process().memory_info().rss / 1024 / 1024 if log_memory else None

            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _record_call(func_name, time.perf_counter() - start_time, slow_threshold, error=e)
                raise

            _record_call(func_name, time.perf_counter() - start_time, slow_threshold)
            if log_memory and start_memory is not None:
                end_memory = psutil.Process().memory_info().rss / 1024 / 1024
                memory_diff = end_memory - start_memory
                if abs(memory_diff) > 10:
                    perf_logger.info(f"{func_name} memory change: {memory_diff:+.1f}MB (now: {end_memory:.1f}MB)")
            return result

        return wrapper

    return decorator


def _is_rejection(error: Exception) -> bool:
    # Bad client input, not a failure of the monitored function
    return isinstance(error, SearchError) and not error.recoverable


def _record_call(func_name: str, execution_time: float, slow_threshold: float, error: Optional[Exception] = None):
    with _metrics_lock:
        metrics = _performance_metrics.setdefault(
            func_name,
            {"call_count": 0, "total_time": 0.0, "max_time": 0.0, "error_count": 0, "last_call": None},
        )
        metrics["call_count"] += 1
        metrics["total_time"] += execution_time
        metrics["max_time"] = max(metrics["max_time"], execution_time)
        metrics["last_call"] = datetime.now().isoformat()
        if error is not None and not _is_rejection(error):
            metrics["error_count"] += 1

    if error is not None and _is_rejection(error):
        perf_logger.warning(f"{func_name} rejected after {execution_time:.3f}s: {type(error).__name__}: {error}")
    elif error is not None:
        perf_logger.error(f"{func_name} failed after {execution_time:.3f}s: {type(error).__name__}: {error}")
    elif execution_time > slow_threshold:
        perf_logger.warning(f"SLOW: {func_name} took {execution_time:.3f}s (threshold: {slow_threshold}s)")
    else:
        perf_logger.debug(f"{func_name} completed in {execution_time:.3f}s")


def get_performance_summary() -> pd.DataFrame:
    """
    Summarize metrics for all monitored functions, slowest first.

    Returns:
        pd.DataFrame with columns function_name, call_count, avg_time,
        max_time, error_rate (percent) and last_call
    """
    with _metrics_lock:
        snapshot = {name: dict(m) for name, m in _performance_metrics.items()}

    if not snapshot:
        return pd.DataFrame()

    rows = [
        {
            "function_name": name,
            "call_count": m["call_count"],
            "avg_time": round(m["total_time"] / m["call_count"], 3),
            "max_time": round(m["max_time"], 3),
            "error_rate": round(m["error_count"] / m["call_count"] * 100, 1),
            "last_call": m["last_call"],
        }
        for name, m in snapshot.items()
    ]
    return pd.DataFrame(rows).sort_values("avg_time", ascending=False).reset_index(drop=True)


def reset_performance_metrics() -> None:
    with _metrics_lock:
        _performance_metrics.clear()
    perf_logger.info("Performance metrics reset")
