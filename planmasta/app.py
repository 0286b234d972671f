"""Application assembly, JSON logging and the server entry point."""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
import uuid
from datetime import datetime, timezone
from typing import IO

from flask import Flask, Response, g, request

from planmasta.config import load_config
from planmasta.handlers import OpenAIHandler, ReplicateHandler
from planmasta.openai_service import OpenAIService
from planmasta.replicate_service import ReplicateService

LOGGER_NAME = "planmasta"

_RESERVED = set(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {
    "message",
    "asctime",
    "taskName",
}

_LEVEL_NAMES = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "ERROR",
}


class JsonFormatter(logging.Formatter):
    """Formats records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc).astimezone()
        entry = {
            "time": timestamp.isoformat(timespec="microseconds"),
            "level": _LEVEL_NAMES.get(record.levelno, record.levelname),
            "msg": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED and not key.startswith("_"):
                entry[key] = value
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


def configure_logging(stream: IO[str] | None = None) -> logging.Logger:
    """Return the package logger writing JSON lines at debug level to ``stream``."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def _real_ip() -> str:
    forwarded = request.headers.get("True-Client-IP") or request.headers.get("X-Real-IP")
    if forwarded:
        return forwarded
    chain = request.headers.get("X-Forwarded-For", "")
    if chain:
        return chain.split(",")[0].strip()
    return request.remote_addr or ""


def create_app(
    openai_service: OpenAIService,
    replicate_service: ReplicateService,
    logger: logging.Logger | None = None,
) -> Flask:
    """Build the Flask application with its routes and request middleware."""
    logger = logger or logging.getLogger(LOGGER_NAME)
    app = Flask(LOGGER_NAME)

    openai_handler = OpenAIHandler(openai_service, logger)
    replicate_handler = ReplicateHandler(replicate_service, logger)

    @app.before_request
    def _prepare() -> None:
        g.request_id = request.headers.get("X-Request-Id") or uuid.uuid4().hex
        g.real_ip = _real_ip()
        g.started = time.monotonic()

    @app.after_request
    def _log_request(response: Response) -> Response:
        started = g.get("started", time.monotonic())
        logger.info(
            "request",
            extra={
                "method": request.method,
                "path": request.path,
                "status": response.status_code,
                "remote": g.get("real_ip", ""),
                "request_id": g.get("request_id", ""),
                "duration": int((time.monotonic() - started) * 1000),
            },
        )
        return response

    app.add_url_rule("/chat", "chat", openai_handler.chat, methods=["POST"])
    app.add_url_rule("/replicate", "replicate", replicate_handler.generate, methods=["POST"])
    return app


def main(argv: list[str] | None = None) -> None:
    """Load the configuration and serve the API."""
    parser = argparse.ArgumentParser(prog=LOGGER_NAME)
    parser.add_argument("--env-file", default=None, help="path of the .env file")
    args = parser.parse_args(argv)

    cfg = load_config(args.env_file)
    logger = configure_logging()

    app = create_app(
        OpenAIService(cfg.openai_key, logger),
        ReplicateService(cfg.replicate_key, logger),
        logger,
    )

    logger.info("starting server", extra={"port": cfg.port})
    app.run(host="0.0.0.0", port=int(cfg.port))


if __name__ == "__main__":
    main()