"""httpx transports for error report batches and analytics samples."""

import json
from collections.abc import Iterable, Mapping
from typing import Any

import httpx

from pagetelemetry.core.encoding.wire import encode_analytics_event, encode_report_batch
from pagetelemetry.core.errors import DeliveryError
from pagetelemetry.core.models import ErrorReport, Sample

_JSON_HEADERS = {"Content-Type": "application/json"}


class _HttpJsonTransport:
    """Shared POST logic for JSON endpoints.

    Args:
        endpoint: URL to POST to.
        client: Client to send with. When omitted the transport creates its
            own and closes it in aclose().
        timeout: Request timeout in seconds for a self-created client.
    """

    def __init__(
        self,
        endpoint: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.endpoint = endpoint
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def _post(self, body: dict[str, Any]) -> httpx.Response:
        response = await self._client.post(
            self.endpoint,
            content=json.dumps(body, default=str),
            headers=_JSON_HEADERS,
        )
        if not response.is_success:
            raise DeliveryError(response.status_code, response.reason_phrase)
        return response

    async def aclose(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()


class HttpReportTransport(_HttpJsonTransport):
    """Implementation of ReportTransportPort over HTTP.

    Sends ``{"reports": [...], "metadata": {...}}``. Any non-2xx response
    raises DeliveryError; network errors propagate as httpx exceptions.
    """

    async def send(
        self, reports: Iterable[ErrorReport], metadata: Mapping[str, Any]
    ) -> None:
        await self._post(encode_report_batch(reports, metadata))


class HttpAnalyticsTransport(_HttpJsonTransport):
    """Implementation of AnalyticsTransportPort over HTTP.

    Sends the sample fields merged with url, userAgent and timestamp.
    """

    async def send(self, sample: Sample, context: Mapping[str, Any]) -> None:
        await self._post(encode_analytics_event(sample, context))
