"""ASGI generic adapter for telemetry.

Provides an error-boundary middleware that captures unhandled exceptions
into a ReportDispatcher, and a framework-agnostic dashboard app exposing
collected samples and bundle stats. Works with any ASGI server (uvicorn,
hypercorn, daphne) without FastAPI or Django.
"""

import json
from collections.abc import Callable, Coroutine
from typing import TYPE_CHECKING, Any

from pagetelemetry.core.context import clear_host_context, set_host_context
from pagetelemetry.core.encoding.wire import bundle_stats_to_dict, encode_samples
from pagetelemetry.core.logs import get_logger, log_exception
from pagetelemetry.core.reporting import ReportDispatcher

if TYPE_CHECKING:
    from pagetelemetry.client import Telemetry

logger = get_logger(__name__)

# ASGI type aliases
Scope = dict[str, Any]
Receive = Callable[[], Coroutine[Any, Any, dict[str, Any]]]
Send = Callable[[dict[str, Any]], Coroutine[Any, Any, None]]
ASGIApp = Callable[[Scope, Receive, Send], Coroutine[Any, Any, None]]


def _header(scope: Scope, name: str) -> str:
    """Return a request header value (case-insensitive), or empty string."""
    wanted = name.lower().encode()
    headers: list[tuple[bytes, bytes]] = scope.get("headers", [])
    for key, value in headers:
        if key.lower() == wanted:
            return value.decode("utf-8", errors="replace")
    return ""


def _request_url(scope: Scope) -> str:
    """Reconstruct the request URL from ASGI scope.

    Uses the Host header when present, falling back to the server tuple.
    """
    scheme = scope.get("scheme", "http")
    host = _header(scope, "host")
    if not host and scope.get("server"):
        server_host, port = scope["server"]
        default_port = {"http": 80, "https": 443}.get(scheme)
        host = server_host if port in (None, default_port) else f"{server_host}:{port}"
    path = scope.get("root_path", "") + scope.get("path", "")
    url = f"{scheme}://{host}{path}" if host else path
    query_string = scope.get("query_string", b"").decode(errors="replace")
    if query_string:
        url = f"{url}?{query_string}"
    return url


async def _send_response(send: Send, status: int, content_type: str, body: str) -> None:
    """Send an HTTP response with headers and body."""
    headers = [(b"content-type", content_type.encode())]
    await send({"type": "http.response.start", "status": status, "headers": headers})
    await send({"type": "http.response.body", "body": body.encode()})


async def _handle_endpoint(
    send: Send,
    endpoint_func: Callable[[], str],
    content_type: str,
    log_message: str,
) -> None:
    """Build a response body with error handling and send it.

    Args:
        send: ASGI send callable for writing response.
        endpoint_func: Function that returns the response body.
        content_type: Content-Type header for success response.
        log_message: Message to log on error.
    """
    try:
        body = endpoint_func()
    except Exception:
        log_exception(log_message, logger)
        error_body = json.dumps({"error": "Internal Server Error"})
        await _send_response(send, 500, "application/json", error_body)
        return
    await _send_response(send, 200, content_type, body)


class ErrorBoundaryMiddleware:
    """ASGI middleware that reports unhandled application exceptions.

    For each HTTP request the ambient host context (url, user agent) is set
    so reports captured anywhere during the request carry it. Exceptions
    escaping the wrapped app are captured and then re-raised.
    """

    def __init__(self, app: ASGIApp, dispatcher: ReportDispatcher) -> None:
        """Initialize the middleware.

        Args:
            app: The ASGI application to wrap.
            dispatcher: Dispatcher that receives captured exceptions.
        """
        self.app = app
        self.dispatcher = dispatcher

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI callable interface that processes requests through the wrapped app."""
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        set_host_context(
            url=_request_url(scope), user_agent=_header(scope, "user-agent")
        )
        try:
            await self.app(scope, receive, send)
        except Exception as e:
            self.dispatcher.capture_exception(
                e, error_info=f"{scope['method']} {scope['path']}"
            )
            raise
        finally:
            clear_host_context()


def create_asgi_app(telemetry: "Telemetry") -> ASGIApp:
    """Create an ASGI app with /vitals, /resources and /reports endpoints.

    Args:
        telemetry: Telemetry handle to read from.

    Returns:
        ASGI application callable.
    """

    def pending_reports() -> str:
        dispatcher = telemetry.dispatcher
        return json.dumps(
            {
                "pending": len(dispatcher.pending_reports()),
                "flushing": dispatcher.is_flushing,
            }
        )

    async def app(scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            return

        path = scope["path"]

        if path == "/vitals":
            await _handle_endpoint(
                send,
                lambda: encode_samples(telemetry.get_metrics()),
                "application/x-ndjson",
                "Error encoding vitals endpoint",
            )
        elif path == "/resources":
            await _handle_endpoint(
                send,
                lambda: json.dumps(bundle_stats_to_dict(telemetry.bundle_stats())),
                "application/json",
                "Error encoding resources endpoint",
            )
        elif path == "/reports":
            await _handle_endpoint(
                send,
                pending_reports,
                "application/json",
                "Error encoding reports endpoint",
            )
        else:
            await _send_response(send, 404, "text/plain", "Not Found")

    return app
