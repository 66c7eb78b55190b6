"""Logging setup and per-request access logging."""

import logging
import time

from flask import Flask, Response, g, request

access_logger = logging.getLogger("recipes.access")


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger once per process."""
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


def register_request_logging(app: Flask) -> None:
    """Log ``METHOD path status duration`` for every request."""

    @app.before_request
    def _start_timer() -> None:
        g.request_started = time.perf_counter()

    @app.after_request
    def _log_request(response: Response) -> Response:
        started = g.get("request_started")
        elapsed_ms = (time.perf_counter() - started) * 1000 if started is not None else 0.0
        access_logger.info(
            "%s %s %s %.3f ms",
            request.method,
            request.path,
            response.status_code,
            elapsed_ms,
        )
        return response


__all__ = ["register_request_logging", "setup_logging"]
