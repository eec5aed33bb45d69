"""Example: pagetelemetry with a plain ASGI application.

Run with:
    uvicorn examples.asgi_example:app --reload

Then visit:
    http://localhost:8000/          - Hello page
    http://localhost:8000/boom      - Raises; the error is queued as a report
    http://localhost:8000/slow      - Logs an error; the handler queues a report
    http://localhost:8000/telemetry/vitals    - Collected samples (NDJSON)
    http://localhost:8000/telemetry/resources - Bundle stats (JSON)
    http://localhost:8000/telemetry/reports   - Pending report count

Set TELEMETRY_ERROR_REPORTING_ENDPOINT to deliver reports somewhere real.
"""

import logging

from pagetelemetry import (
    PerformanceTimeline,
    ReportingHandler,
    TimingEntry,
    create_telemetry,
)
from pagetelemetry.adapters.frameworks.asgi import (
    ErrorBoundaryMiddleware,
    Receive,
    Scope,
    Send,
    create_asgi_app,
)

logging.basicConfig(level=logging.INFO)

timeline = PerformanceTimeline()
telemetry = create_telemetry(source=timeline)
logger = logging.getLogger("example")
logger.addHandler(ReportingHandler(telemetry.dispatcher))

# Simulated page timings, as a browser agent would forward them.
timeline.record(
    TimingEntry(entry_type="navigation", fetch_start=5.0, response_start=180.0),
    TimingEntry(entry_type="largest-contentful-paint", start_time=1850.0),
    TimingEntry(entry_type="layout-shift", value=0.04),
    TimingEntry(
        entry_type="resource",
        name="https://cdn.example.com/static/app.js",
        duration=120.0,
        transfer_size=48_000,
    ),
    TimingEntry(
        entry_type="resource",
        name="https://cdn.example.com/static/site.css",
        duration=40.0,
        transfer_size=9_500,
    ),
)

telemetry_app = create_asgi_app(telemetry)


async def _text(send: Send, body: str) -> None:
    await send(
        {
            "type": "http.response.start",
            "status": 200,
            "headers": [(b"content-type", b"text/plain")],
        }
    )
    await send({"type": "http.response.body", "body": body.encode()})


async def main_app(scope: Scope, receive: Receive, send: Send) -> None:
    """Main application with a telemetry sub-app mounted at /telemetry."""
    if scope["type"] == "lifespan":
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await telemetry.aclose()
                await send({"type": "lifespan.shutdown.complete"})
                return

    path = scope["path"]
    if path.startswith("/telemetry/"):
        sub_scope = {**scope, "path": path.removeprefix("/telemetry")}
        await telemetry_app(sub_scope, receive, send)
    elif path == "/slow":
        logger.error("Checkout page exceeded its render budget")
        await _text(send, "Logged an error report")
    elif path == "/boom":
        raise RuntimeError("Something broke while rendering /boom")
    else:
        await _text(send, "Hello from pagetelemetry")


app = ErrorBoundaryMiddleware(main_app, telemetry.dispatcher)
