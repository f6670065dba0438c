"""FastAPI application factory for the tasks-map REST API."""

from fastapi import APIRouter, FastAPI

from tasks_map.api.routes import register_routes


def create_app(session) -> FastAPI:
    """Build and return a FastAPI app wired to the given TaskMapSession."""
    app = FastAPI(title="tasks-map", docs_url="/api/docs", openapi_url="/api/openapi.json")

    api = APIRouter(prefix="/api")
    register_routes(api, session)
    app.include_router(api)

    return app
