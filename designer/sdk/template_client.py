"""HTTP client for the workflow template endpoints.

    client = TemplateClient("http://localhost:8000")
    payload = client.fetch_template(42)
"""

from __future__ import annotations

import os
from typing import Any

import httpx

DEFAULT_BASE_URL = os.getenv("WORKFLOW_API_URL", "http://localhost:8000")
DEFAULT_TIMEOUT = float(os.getenv("WORKFLOW_API_TIMEOUT", "10"))

TEMPLATES_PATH = "/api/workflows/templates"


class TemplateClientError(Exception):
    """Exception raised when a template request fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TemplateNotFoundError(TemplateClientError):
    """The backend has no template (or sub-resource) with that id."""


class TemplateClient:
    """Thin wrapper over the backend's template REST endpoints.

    Payloads go in and come out as plain wire dicts; decoding into
    models is the persistence adapter's job.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: httpx.Client | None = None,
    ) -> None:
        """
        Args:
            base_url: Base URL of the template backend
            timeout: HTTP request timeout in seconds
            http_client: Pre-configured client to send requests through
                (its own base URL is used); one is opened per request otherwise
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._http_client = http_client

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            if self._http_client is not None:
                response = self._http_client.request(method, path, **kwargs)
            else:
                with httpx.Client(base_url=self.base_url, timeout=self.timeout) as client:
                    response = client.request(method, path, **kwargs)
        except httpx.RequestError as e:
            raise TemplateClientError(
                f"Failed to connect to server at {self.base_url}: {e}"
            ) from e

        if response.status_code == 404:
            raise TemplateNotFoundError(
                f"Not found: {method} {path}", status_code=404
            )
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TemplateClientError(
                f"{method} {path} failed with {response.status_code}: {_detail(response)}",
                status_code=response.status_code,
            ) from e
        return response

    def list_templates(self) -> list[dict]:
        return self._request("GET", TEMPLATES_PATH).json()

    def fetch_template(self, template_id: int | str) -> dict:
        return self._request("GET", f"{TEMPLATES_PATH}/{template_id}").json()

    def create_template(self, payload: dict) -> dict:
        """POST a new template; the response carries the assigned id."""
        return self._request("POST", TEMPLATES_PATH, json=payload).json()

    def update_template(self, template_id: int | str, payload: dict) -> dict:
        """PUT the full template; the response echoes the stored state."""
        return self._request("PUT", f"{TEMPLATES_PATH}/{template_id}", json=payload).json()

    def delete_template(self, template_id: int | str) -> None:
        self._request("DELETE", f"{TEMPLATES_PATH}/{template_id}")

    def add_stage(self, template_id: int | str, stage: dict) -> dict:
        """Append one stage to a stored template."""
        return self._request(
            "POST", f"{TEMPLATES_PATH}/{template_id}/stages", json=stage
        ).json()

    def delete_transition(self, template_id: int | str, transition_id: int | str) -> None:
        self._request(
            "DELETE", f"{TEMPLATES_PATH}/{template_id}/transitions/{transition_id}"
        )


def _detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict) and "detail" in body:
        return str(body["detail"])
    return str(body)
