from __future__ import annotations

import uuid

import structlog
from flask import Flask, g, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.exceptions import DomainError, ValidationFailed

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def current_trace_id() -> str:
    return getattr(g, "request_id", None) or str(uuid.uuid4())


def _body(message: str, code: str, status_code: int, **extra):
    payload = {"message": message, "code": code, "statusCode": status_code, "traceId": current_trace_id()}
    payload.update(extra)
    return jsonify(payload), status_code


def register(app: Flask) -> None:
    """Request id propagation plus JSON error responses for every failure path."""

    @app.before_request
    def bind_request_id():
        g.request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=g.request_id, path=request.path, method=request.method)

    @app.after_request
    def echo_request_id(response):
        response.headers[REQUEST_ID_HEADER] = current_trace_id()
        return response

    @app.errorhandler(ValidationFailed)
    def handle_validation_failed(exc: ValidationFailed):
        logger.info("request_rejected", code=exc.code, error_count=len(exc.errors))
        return _body(exc.message, exc.code, exc.status_code, errors=exc.errors)

    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        if exc.status_code >= 500:
            logger.error("domain_error", code=exc.code, error=exc.message)
        else:
            logger.info("request_rejected", code=exc.code, status_code=exc.status_code)
        return _body(exc.message, exc.code, exc.status_code)

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        code = (exc.name or "HTTP_ERROR").upper().replace(" ", "_")
        return _body(exc.description or exc.name, code, exc.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        trace_id = current_trace_id()
        logger.exception("unhandled_exception", trace_id=trace_id)
        return _body("An unexpected error occurred.", "INTERNAL_SERVER_ERROR", 500)
