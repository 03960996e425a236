"""Web transport — the Starlette/ASGI adapter."""
