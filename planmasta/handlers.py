"""HTTP handlers for the chat and image generation endpoints."""

from __future__ import annotations

import json
import logging
import time
from http import HTTPStatus

from flask import Response, request

from planmasta.dto import GenerateRequest
from planmasta.openai_service import OpenAIService, ServiceError
from planmasta.replicate_service import ReplicateError, ReplicateService

FAILURE_MESSAGE = "Failed to process request"
_SNIFFED_TEXT_TYPE = "text/plain; charset=utf-8"


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


def _failure_response(status: int) -> Response:
    body = json.dumps({"error": FAILURE_MESSAGE}, separators=(",", ":"))
    return Response(body, status=status, content_type="application/json")


def _decode_first_value(raw: bytes):
    """Decode the first JSON value in ``raw``; trailing data is ignored."""
    text = raw.decode("utf-8", errors="replace").lstrip(" \t\r\n")
    if not text:
        raise ValueError("EOF")
    value, _ = json.JSONDecoder().raw_decode(text)
    return value


class OpenAIHandler:
    """Proxies chat completion requests to the OpenAI service."""

    def __init__(self, service: OpenAIService, logger: logging.Logger | None = None):
        self.service = service
        self.logger = logger or logging.getLogger(__name__)

    def chat(self) -> Response:
        """Forward the current request body and relay the upstream answer."""
        start = time.monotonic()

        try:
            content, status_code = self.service.send_request(request.get_data())
        except ServiceError as exc:
            self.logger.error(FAILURE_MESSAGE, extra={"err": str(exc)})
            return _failure_response(exc.status_code)

        response = Response(content, status=status_code, content_type=_SNIFFED_TEXT_TYPE)
        self.logger.info(
            "Sent response",
            extra={"size": str(len(content)), "duration": _elapsed_ms(start)},
        )
        return response


class ReplicateHandler:
    """Turns generation requests into Replicate predictions."""

    def __init__(self, service: ReplicateService, logger: logging.Logger | None = None):
        self.service = service
        self.logger = logger or logging.getLogger(__name__)

    def generate(self) -> Response:
        """Decode the current request, run the prediction and return its result."""
        start = time.monotonic()

        try:
            generate_request = GenerateRequest.from_dict(_decode_first_value(request.get_data()))
        except ValueError as exc:
            return Response(str(exc), status=HTTPStatus.BAD_REQUEST, content_type=_SNIFFED_TEXT_TYPE)

        try:
            result = self.service.send_request(generate_request)
        except ReplicateError as exc:
            self.logger.error(FAILURE_MESSAGE, extra={"err": str(exc)})
            return _failure_response(HTTPStatus.INTERNAL_SERVER_ERROR)

        body = json.dumps(result.to_dict(), ensure_ascii=False, separators=(",", ":")) + "\n"
        response = Response(body, status=HTTPStatus.OK, content_type="application/json")
        self.logger.info("Sent response", extra={"duration": _elapsed_ms(start)})
        return response