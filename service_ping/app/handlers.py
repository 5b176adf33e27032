"""
Method dispatch for the Ping service.

Every handled method answers with the fixed ``{"ping": "pong"}`` payload plus
a method-specific message. GET is guarded by the admission gate; POST must
carry ``{"hello": "world"}``; PUT, PATCH and DELETE accept any JSON body.
"""

import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union

from shared.logging import get_logger
from shared.errors import (
    AdmissionRejectedError,
    MalformedBodyError,
    MethodNotAllowedError,
    ValidationError,
)

from .admission import AdmissionGate


PING_PAYLOAD = {"ping": "pong"}


@dataclass
class HandlerResult:
    """Status code and body produced by a handler."""
    status_code: int
    body: Union[Dict[str, Any], str]


def success(method: str) -> HandlerResult:
    """Build the 200 response for a method."""
    return HandlerResult(200, {**PING_PAYLOAD, "message": f"Successful {method} request"})


def parse_body(method: str, raw: bytes) -> Any:
    """Decode a JSON request body.

    Raises MalformedBodyError for empty, non-UTF-8, invalid or too deeply
    nested JSON bodies.
    """
    if not raw or not raw.strip():
        raise MalformedBodyError(details={"method": method, "reason": "empty body"})
    try:
        return json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError, RecursionError) as e:
        raise MalformedBodyError(details={"method": method, "reason": str(e)}) from e


class MethodRouter:
    """Dispatch table from HTTP method to handler."""

    def __init__(self, gate: AdmissionGate, metrics=None):
        self.gate = gate
        self.metrics = metrics
        self.logger = get_logger("ping.handlers")
        self._handlers: Dict[str, Callable[[bytes], HandlerResult]] = {
            "GET": self.handle_get,
            "POST": self.handle_post,
            "PUT": self._echo("PUT"),
            "PATCH": self._echo("PATCH"),
            "DELETE": self._echo("DELETE"),
        }

    @property
    def allowed_methods(self):
        return list(self._handlers)

    def dispatch(self, method: str, body: Optional[bytes] = None) -> HandlerResult:
        """Route a request to its handler.

        Handler failures surface as PingServiceException subclasses; the
        service's exception handlers turn them into responses.
        """
        handler = self._handlers.get(method.upper())
        if handler is None:
            self.logger.warning("Unhandled request method", method=method)
            raise MethodNotAllowedError(method, allowed=self.allowed_methods)
        return handler(body or b"")

    def handle_get(self, body: bytes) -> HandlerResult:
        if not self.gate.admit():
            self.logger.warning("Too many GET requests", threshold=self.gate.threshold)
            self._record_decision("rejected")
            raise AdmissionRejectedError(details={"threshold": self.gate.threshold})

        self.logger.info("Successful GET request")
        self._record_decision("admitted")
        return success("GET")

    def handle_post(self, body: bytes) -> HandlerResult:
        payload = self._parse(body, "POST")
        self.logger.info("POST Request Body", body=payload)

        if not isinstance(payload, dict) or payload.get("hello") != "world":
            self._record_body_rejection("POST", "invalid")
            raise ValidationError(details={"expected": {"hello": "world"}})

        return success("POST")

    def _echo(self, method: str) -> Callable[[bytes], HandlerResult]:
        def handler(body: bytes) -> HandlerResult:
            payload = self._parse(body, method)
            self.logger.info(f"{method} Request Body", body=payload)
            return success(method)

        handler.__name__ = f"handle_{method.lower()}"
        return handler

    def _parse(self, body: bytes, method: str) -> Any:
        try:
            return parse_body(method, body)
        except MalformedBodyError:
            self._record_body_rejection(method, "malformed")
            raise

    def _record_decision(self, decision: str):
        if self.metrics is None:
            return
        self.metrics.increment_counter("admission_decisions_total", decision=decision)
        self.metrics.set_gauge("admission_admitted", self.gate.count)

    def _record_body_rejection(self, method: str, reason: str):
        if self.metrics is not None:
            self.metrics.increment_counter("request_bodies_rejected_total", method=method, reason=reason)
