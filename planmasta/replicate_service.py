"""Image generation through Replicate models."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Mapping

import requests

from planmasta.dto import GenerateRequest, Quality

TURBO_URL = "https://api.replicate.com/v1/models/ideogram-ai/ideogram-v3-turbo/predictions"
BALANCED_URL = (
    "https://api.replicate.com/v1/models/ideogram-ai/ideogram-v3-balanced/predictions"
)
MAX_URL = (
    "https://api.replicate.com/v1/models/black-forest-labs/flux-kontext-max/predictions"
)


class ReplicateError(RuntimeError):
    """Raised when a prediction cannot be requested or decoded."""


@dataclass
class ReplicateResponse:
    """Result of a prediction: the output location."""

    output: str = ""

    @classmethod
    def _from_json(cls, data: Any) -> "ReplicateResponse":
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise ReplicateError(
                f"cannot decode {type(data).__name__} into ReplicateResponse"
            )
        output = ""
        for key, value in data.items():
            if str(key).lower() != "output" or value is None:
                continue
            if not isinstance(value, str):
                raise ReplicateError(
                    f"cannot decode {type(value).__name__} into field "
                    "ReplicateResponse.output of type string"
                )
            output = value
        return cls(output=output)

    def to_dict(self) -> dict[str, str]:
        """Return the JSON-ready form of the response."""
        return {"output": self.output}


def model_url(quality: Quality | str) -> str:
    """Return the prediction endpoint for ``quality``; unknown values get the best model."""
    if quality == Quality.LOW:
        return TURBO_URL
    if quality == Quality.MEDIUM:
        return BALANCED_URL
    return MAX_URL


class ReplicateService:
    """Requests image predictions and waits for their result."""

    def __init__(
        self,
        api_key: str,
        logger: logging.Logger | None = None,
        session: requests.Session | None = None,
    ):
        self.api_key = api_key
        self.logger = logger or logging.getLogger(__name__)
        self.session = session or requests.Session()

    def build_payload(self, request: GenerateRequest) -> dict[str, dict[str, str]]:
        """Return the prediction input for ``request``."""
        return {"input": {"prompt": request.prompt}}

    def send_request(self, request: GenerateRequest) -> ReplicateResponse:
        """Run a prediction and return its decoded response."""
        start = time.monotonic()
        self.logger.info("Sending request to replicate")

        payload = json.dumps(self.build_payload(request), ensure_ascii=False) + "\n"
        url = model_url(request.quality)
        self.logger.info(url)

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Prefer": "wait",
        }
        try:
            response = self.session.post(url, data=payload.encode("utf-8"), headers=headers)
        except requests.RequestException as exc:
            self.logger.error("failed to send request", extra={"error": str(exc)})
            raise ReplicateError(str(exc)) from exc

        with response:
            try:
                decoded = json.loads(response.content)
            except (ValueError, requests.RequestException) as exc:
                raise ReplicateError(f"invalid response: {exc}") from exc

        result = ReplicateResponse._from_json(decoded)
        elapsed_ms = int((time.monotonic() - start) * 1000)
        self.logger.info("Replicate request finished", extra={"duration": elapsed_ms})
        return result