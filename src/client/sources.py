"""
Marker sources for the client data controller.

A source knows how to obtain the marker envelope
``{success, message, timestamp, data: {markers, statistics, metadata}}``.
Two variants exist:

- ``ApiMarkerSource`` calls ``GET /api/markers`` over HTTP (httpx)
- ``FileMarkerSource`` reads the static dataset document from disk, for
  offline/dev use

Both return the raw envelope; interpretation happens in the controller so
that both go through the same transform step.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Union

import httpx

from src.client.errors import ParseFailure, UpstreamFailure

logger = logging.getLogger(__name__)

MARKERS_ENDPOINT = "/api/markers"


class MarkerSource(Protocol):
    """Anything the controller can load a marker envelope from."""

    async def fetch(self) -> Dict[str, Any]:
        ...

    async def aclose(self) -> None:
        ...


class ApiMarkerSource:
    """
    Load markers from the marker API.

    Parameters
    ----------
    base_url : str
        API root, e.g. ``http://localhost:4301``
    region : Optional[str]
        Region substring filter forwarded as a query parameter
    type : Optional[str]
        Marker type filter forwarded as a query parameter
    limit : Optional[Union[str, int]]
        Result cap forwarded as a query parameter
    timeout : float
        Per-request timeout in seconds
    transport : Optional[httpx.AsyncBaseTransport]
        Custom transport (ASGI app, mock transport)
    """

    def __init__(
        self,
        base_url: str = "http://localhost:4301",
        region: Optional[str] = None,
        type: Optional[str] = None,
        limit: Optional[Union[str, int]] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.params = {
            key: str(value)
            for key, value in (("region", region), ("type", type), ("limit", limit))
            if value is not None and value != ""
        }
        self._client = httpx.AsyncClient(
            base_url=base_url, timeout=timeout, transport=transport
        )

    async def fetch(self) -> Dict[str, Any]:
        """
        Request the marker envelope.

        Raises
        ------
        UpstreamFailure
            On network errors or a non-2xx status
        ParseFailure
            If the body is not JSON
        """
        logger.debug(f"Fetching markers from {self._client.base_url} params={self.params}")
        try:
            response = await self._client.get(MARKERS_ENDPOINT, params=self.params)
        except httpx.HTTPError as e:
            raise UpstreamFailure(f"Network error: {e}") from e

        if not response.is_success:
            raise UpstreamFailure(f"API error: {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise ParseFailure(f"Invalid JSON from API: {e}") from e

    async def aclose(self) -> None:
        await self._client.aclose()


class FileMarkerSource:
    """Load markers from the static dataset document."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    async def fetch(self) -> Dict[str, Any]:
        """
        Read the dataset document.

        Raises
        ------
        UpstreamFailure
            If the file cannot be read
        ParseFailure
            If the file is not JSON
        """
        logger.debug(f"Reading markers from {self.path}")
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise UpstreamFailure(f"Could not load file {self.path}: {e}") from e

        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ParseFailure(f"Invalid JSON in {self.path}: {e}") from e

    async def aclose(self) -> None:
        return None
