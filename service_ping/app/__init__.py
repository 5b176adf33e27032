"""
Ping Service package.

Echoes a fixed ``{"ping": "pong"}`` payload back to callers, branching on
HTTP method only. GET requests pass through an admission gate that stops
serving them once a fixed number have been admitted.

Structure:
- app.main: FastAPI app, routes, and service wiring.
- app.handlers: Method dispatch table and per-method handlers.
- app.admission: The admission gate guarding GET.
- app.loadtest: Stepped load-test client for exercising a running service.
"""
