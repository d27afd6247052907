"""Model catalog API routes."""

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from ...app import Application


class ModelResponse(BaseModel):
    """Response model for a catalog entry."""

    id: str
    display_name: str
    provider: str
    description: str | None = None


def create_models_router(app: Application) -> APIRouter:
    """Create model catalog router."""
    router = APIRouter(prefix="/api", tags=["models"])

    @router.get("/models", response_model=list[ModelResponse])
    async def list_models(
        force: bool = Query(False, description="Bypass the cache"),
    ) -> list[dict]:
        """List usable models."""
        try:
            entries = await app.list_models(force_refresh=force)
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        return [
            {
                "id": e.id,
                "display_name": e.display_name,
                "provider": e.provider,
                "description": e.description,
            }
            for e in entries
        ]

    return router
