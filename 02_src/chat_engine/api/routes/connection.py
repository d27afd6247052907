"""Connection status API routes."""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from ...app import Application


class ConnectionResponse(BaseModel):
    """Response model for connection status."""

    status: str


def create_connection_router(app: Application) -> APIRouter:
    """Create connection router."""
    router = APIRouter(prefix="/api/connection", tags=["connection"])

    @router.get("", response_model=ConnectionResponse)
    async def get_connection_status() -> dict:
        """Current connection status."""
        return {"status": app.get_connection_status().value}

    @router.post("/retry", response_model=ConnectionResponse)
    async def retry_connection() -> dict:
        """Re-inject the gateway SDK and detect again."""
        try:
            status = await app.retry_connection()
            return {"status": status.value}
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    return router
