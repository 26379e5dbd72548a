"""Minimal HTTP client for the Moondream caption/query API.

The same two endpoints are served by the Moondream cloud and by a local
Moondream Station, so only the base URL and auth header differ.
"""

from __future__ import annotations

import base64
import logging
from typing import Any

import requests

from moonrip.core.errors import VisionServiceError

logger = logging.getLogger(__name__)


def _image_data_uri(image: bytes, mime: str = "image/jpeg") -> str:
    return f"data:{mime};base64,{base64.b64encode(image).decode('ascii')}"


class MoondreamClient:
    def __init__(
        self,
        endpoint: str,
        api_key: str | None = None,
        timeout: float = 60.0,
        session: requests.Session | None = None,
    ):
        self.endpoint = endpoint.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()
        if api_key:
            self.session.headers["X-Moondream-Auth"] = api_key

    def _post(self, route: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.endpoint}/{route}"
        try:
            response = self.session.post(url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            raise VisionServiceError(f"Moondream {route} request failed: {e}") from e
        except ValueError as e:
            raise VisionServiceError(f"Moondream {route} returned invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise VisionServiceError(f"Moondream {route} returned {type(data).__name__}, expected a JSON object")
        return data

    def caption(self, image: bytes, length: str = "normal") -> str:
        data = self._post(
            "caption",
            {"image_url": _image_data_uri(image), "length": length, "stream": False},
        )
        return str(data.get("caption", "")).strip()

    def query(self, image: bytes, question: str) -> str:
        data = self._post(
            "query",
            {"image_url": _image_data_uri(image), "question": question, "stream": False},
        )
        return str(data.get("answer", "")).strip()

    def close(self) -> None:
        self.session.close()
