"""API routers for gridslice endpoints.

Routers are included by the app factory (api.main.create_app):
    from api.routers.websocket import router as websocket_router
"""

__all__ = [
    "websocket",
]
