"""Forwarding of chat completion requests to OpenAI."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import IO

import requests

CHAT_COMPLETIONS_URL = "https://api.openai.com/v1/chat/completions"


class ServiceError(RuntimeError):
    """Raised when a request to the upstream API cannot be completed."""

    def __init__(self, message: str, status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR):
        super().__init__(message)
        self.status_code = int(status_code)


class OpenAIService:
    """Sends raw request bodies to the chat completions endpoint."""

    def __init__(
        self,
        api_key: str,
        logger: logging.Logger | None = None,
        session: requests.Session | None = None,
    ):
        self.api_key = api_key
        self.logger = logger or logging.getLogger(__name__)
        self.session = session or requests.Session()

    def send_request(self, body: bytes | IO[bytes]) -> tuple[bytes, int]:
        """Forward ``body`` and return the upstream body and status code.

        Any upstream status is passed through; failures to reach the
        service or to read its answer raise :class:`ServiceError`.
        """
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }
        try:
            response = self.session.post(CHAT_COMPLETIONS_URL, data=body, headers=headers)
        except requests.RequestException as exc:
            self.logger.error("failed to send request", extra={"error": str(exc)})
            raise ServiceError(str(exc)) from exc

        with response:
            status = f"{response.status_code} {response.reason or ''}".rstrip()
            if response.status_code == HTTPStatus.OK:
                self.logger.info("Received response from OpenAI", extra={"status": status})
            else:
                self.logger.warning("Received response from OpenAI", extra={"status": status})

            try:
                content = response.content
            except requests.RequestException as exc:
                self.logger.error("failed to read response body", extra={"error": str(exc)})
                raise ServiceError(str(exc)) from exc

        return content, response.status_code