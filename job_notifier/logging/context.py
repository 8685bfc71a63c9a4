"""Context propagation for structured logging.

Fields pushed with log_context() are injected into every log record emitted
inside the scope. Context lives in a ContextVar, so worker threads only see
it when the submitting code hands them a copy (see run_in_log_context).
"""

from contextvars import ContextVar, Token, copy_context
from typing import Any, Callable, Dict, Optional, TypeVar

T = TypeVar("T")

LogContextVar: ContextVar[Dict[str, Any]] = ContextVar("log_context", default={})


def get_log_context() -> Dict[str, Any]:
    """Get the current logging context.

    Returns:
        Copy of the active context fields (safe to mutate)
    """
    return LogContextVar.get().copy()


def push_log_context(**kwargs) -> Token:
    """Merge fields into the logging context.

    Args:
        **kwargs: Fields to add, overriding any with the same name

    Returns:
        Token to pass to pop_log_context() to restore the previous state

    Example:
        >>> token = push_log_context(run_id="abc123", job_id="42")
        >>> pop_log_context(token)
    """
    current = LogContextVar.get()
    return LogContextVar.set({**current, **kwargs})


def pop_log_context(token: Token) -> None:
    """Restore the logging context to a previous state.

    Args:
        token: Token returned from push_log_context()
    """
    LogContextVar.reset(token)


def clear_log_context() -> None:
    """Clear all logging context fields (used by tests)."""
    LogContextVar.set({})


def run_in_log_context(func: Callable[..., T]) -> Callable[..., T]:
    """Bind func to a snapshot of the caller's context.

    Used when submitting work to a thread pool so log records emitted by the
    worker keep run_id/job_id.

    Args:
        func: Callable to run inside the captured context

    Returns:
        Wrapper accepting the same arguments as func
    """
    ctx = copy_context()

    def runner(*args, **kwargs) -> T:
        # A Context can only be entered by one thread at a time
        return ctx.copy().run(func, *args, **kwargs)

    return runner


class log_context:
    """Context manager for scoped logging context.

    Example:
        >>> with log_context(run_id="abc123", job_id="42"):
        ...     logger.info("Matching subscribers")
    """

    def __init__(self, **kwargs):
        """Initialize with the fields to push.

        Args:
            **kwargs: Fields added for the duration of the block
        """
        self.kwargs = kwargs
        self.token: Optional[Token] = None

    def __enter__(self):
        self.token = push_log_context(**self.kwargs)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.token is not None:
            pop_log_context(self.token)
        return False
