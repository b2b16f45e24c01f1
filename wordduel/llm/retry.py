"""Bounded retry for oracle transport calls."""
import time
from typing import Any, Callable, Optional, Tuple, Type


def retry_call(
    func: Callable[..., Any],
    *args: Any,
    max_retries: int = 1,
    backoff_seconds: float = 0.5,
    retry_on_exceptions: Tuple[Type[BaseException], ...] = (Exception,),
    before_retry: Optional[Callable[[int, BaseException], None]] = None,
    sleep: Callable[[float], None] = time.sleep,
    **kwargs: Any,
) -> Any:
    """Call ``func`` and retry it at most ``max_retries`` times on a listed exception.

    The wait starts at ``backoff_seconds`` and doubles after each failure.
    ``before_retry(attempt, exc)`` runs before each wait.  Exceptions not in
    ``retry_on_exceptions``, and the last failure, propagate unchanged.
    """

    for attempt in range(max_retries + 1):
        try:
            return func(*args, **kwargs)
        except retry_on_exceptions as exc:  # type: ignore[misc]
            if attempt >= max_retries:
                raise
            if before_retry is not None:
                before_retry(attempt + 1, exc)
            sleep(backoff_seconds * (2 ** attempt))
