from typing import Any

import httpx

from digitransit_mcp.data.config import DigitransitConfig

API_KEY_HEADER = "digitransit-subscription-key"


class DigitransitClient:
    """Async HTTP client for the Digitransit GraphQL endpoint.

    Usage:
        async with DigitransitClient(config) as client:
            response = await client.execute(query)
    """

    def __init__(self, config: DigitransitConfig):
        """Initialize the client.

        Args:
            config: Configuration with API key, endpoint and timeout.
        """
        self._config = config
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "DigitransitClient":
        """Enter async context - create HTTP client."""
        headers = {"Content-Type": "application/json"}
        if self._config.api_key:
            headers[API_KEY_HEADER] = self._config.api_key
        self._client = httpx.AsyncClient(headers=headers, timeout=self._config.request_timeout_seconds)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context - close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def execute(self, query: str) -> dict[str, Any] | None:
        """POST a GraphQL query and parse the JSON response.

        Args:
            query: GraphQL query text.

        Returns:
            The parsed response document, or None if the status was not
            successful or the body was empty.

        Raises:
            RuntimeError: If client not initialized.
            httpx.HTTPError: If the request fails (connection, timeout, ...).
            ValueError: If the body is not valid JSON.
        """
        if not self._client:
            raise RuntimeError("Client not initialized - use 'async with'")

        response = await self._client.post(self._config.graphql_url, json={"query": query})
        if not response.is_success:
            return None
        if not response.content or not response.content.strip():
            return None

        document = response.json()
        if not isinstance(document, dict):
            raise ValueError("GraphQL response is not a JSON object")
        return document
