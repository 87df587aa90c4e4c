"""API client for the PickleAI session endpoints."""

import logging

import httpx

from .config import CLIConfig

logger = logging.getLogger(__name__)


class ChatAPIError(RuntimeError):
    """The API answered with an error status or could not be reached."""

    def __init__(self, message: str, code: str = "HTTP_ERROR") -> None:
        super().__init__(message)
        self.code = code


class ChatAPIClient:
    """Client for interacting with the PickleAI chat API."""

    def __init__(self, config: CLIConfig, transport: httpx.AsyncBaseTransport | None = None):
        """Initialize the API client."""
        self.config = config
        self.client = httpx.AsyncClient(timeout=120.0, transport=transport)

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        logger.debug(f"{method} {url} {kwargs.get('json', '')}")
        try:
            response = await self.client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise ChatAPIError("Request timed out.", "TIMEOUT") from e
        except httpx.ConnectError as e:
            raise ChatAPIError(f"Connection error: {e}", "CONNECTION_ERROR") from e

        logger.debug(f"Response status: {response.status_code}")
        if response.status_code >= 400:
            try:
                body = response.json()
                detail, code = body.get("detail", response.text), body.get("code", "HTTP_ERROR")
            except ValueError:
                detail, code = response.text, "HTTP_ERROR"
            raise ChatAPIError(f"HTTP {response.status_code}: {detail}", code)
        return response

    async def create_session(self) -> dict:
        """Open a session; the body includes the welcome message."""
        response = await self._request("POST", self.config.sessions_url)
        return response.json()

    async def send_message(self, session_id: str, content: str) -> dict:
        payload = {"content": content, "user_id": self.config.user_id}
        response = await self._request(
            "POST", f"{self.config.sessions_url}/{session_id}/messages", json=payload
        )
        return response.json()

    async def clear_messages(self, session_id: str) -> dict:
        response = await self._request(
            "DELETE", f"{self.config.sessions_url}/{session_id}/messages"
        )
        return response.json()

    async def delete_session(self, session_id: str) -> None:
        await self._request("DELETE", f"{self.config.sessions_url}/{session_id}")

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()
