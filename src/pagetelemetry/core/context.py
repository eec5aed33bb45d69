"""Ambient host context for reports and samples.

The context is held in a ContextVar so concurrent requests served by the
same process each see their own url and user agent.
"""

from contextvars import ContextVar

from pagetelemetry.core.models import HostContext

_host_context: ContextVar[HostContext | None] = ContextVar(
    "pagetelemetry_host_context", default=None
)
_default_context = HostContext()


def set_default_host_context(url: str = "", user_agent: str = "") -> None:
    """Set the context used when no request-scoped context is active."""
    global _default_context
    _default_context = HostContext(url=url, user_agent=user_agent)


def set_host_context(url: str = "", user_agent: str = "") -> None:
    """Set the context for the current task or request."""
    _host_context.set(HostContext(url=url, user_agent=user_agent))


def get_host_context() -> HostContext:
    """Return the active context, falling back to the default context."""
    return _host_context.get() or _default_context


def clear_host_context() -> None:
    """Clear the request-scoped context."""
    _host_context.set(None)
