"""
Ping service.

Any path answers by HTTP method alone; see ``app.handlers`` for the per-method
behaviour. The service's own ``/health``, ``/metrics`` and ``/admission``
routes take precedence for GET on those paths.
"""

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from shared.base_service import BaseService

from .admission import AdmissionGate
from .handlers import HandlerResult, MethodRouter


DEFAULT_PORT = 3000


def get_router(request: Request) -> MethodRouter:
    """Dependency returning the router installed on the app."""
    return request.app.state.router


def get_gate(request: Request) -> AdmissionGate:
    """Dependency returning the admission gate installed on the app."""
    return request.app.state.gate


def render(result: HandlerResult) -> Response:
    """Convert a handler result into an HTTP response."""
    if isinstance(result.body, str):
        return PlainTextResponse(result.body, status_code=result.status_code)
    return JSONResponse(status_code=result.status_code, content=result.body)


class MethodDispatchEndpoint:
    """ASGI endpoint handing every request, whatever its method, to the router.

    Handler errors propagate to the app's exception handlers.
    """

    async def __call__(self, scope, receive, send):
        request = Request(scope, receive)
        router = get_router(request)
        body = b"" if request.method == "GET" else await request.body()
        response = render(router.dispatch(request.method, body))
        await response(scope, receive, send)


class PingService(BaseService):
    """Ping service implementation."""

    def __init__(self, **config_overrides):
        super().__init__("ping", DEFAULT_PORT, **config_overrides)

        self.gate = AdmissionGate(self.config.get_request_threshold)
        self.router = MethodRouter(self.gate, metrics=self.metrics)
        self.app.state.gate = self.gate
        self.app.state.router = self.router

        self._setup_ping_routes()

        self.logger.info(
            "Ping service configured",
            port=self.config.port,
            get_request_threshold=self.gate.threshold
        )

    def _setup_ping_routes(self):
        """Set up ping-specific routes."""

        @self.app.get("/admission")
        async def admission_stats(gate: AdmissionGate = Depends(get_gate)):
            """Admission gate counters."""
            return gate.stats().to_dict()

        # Starlette restricts plain-function endpoints to GET/HEAD; an ASGI
        # endpoint keeps the route open to every method token.
        self.app.add_route("/{path:path}", MethodDispatchEndpoint(), include_in_schema=False)

    async def _check_dependencies(self):
        """Report the admission gate as a dependency."""
        stats = self.gate.stats()
        return {
            "admission_gate": "open" if stats.remaining > 0 else "closed",
            "admission": stats.to_dict()
        }


def create_app(**config_overrides) -> FastAPI:
    """Create ping service application."""
    service = PingService(**config_overrides)
    return service.app


if __name__ == "__main__":
    service = PingService()
    service.run()
