"""Exchange API routes."""

import asyncio
import json

from fastapi import APIRouter, HTTPException
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from ...app import Application
from ...errors import EngineError
from ...models import Attachment, ExchangeConfig


class AttachmentRequest(BaseModel):
    """A text attachment already extracted by the client."""

    name: str
    content: str
    size: int = 0
    ext: str = ""


class ExchangeRequest(BaseModel):
    """Request model for sending a message."""

    text: str
    model_id: str
    system_prompt: str = ""
    temperature: float = Field(1.0, ge=0.0, le=2.0)
    test_mode: bool = False
    attachments: list[AttachmentRequest] = Field(default_factory=list)


class MessageResponse(BaseModel):
    """Response model for a transcript message."""

    id: str
    role: str
    content: str
    created_at: str


class StatusResponse(BaseModel):
    """Response model for status."""

    status: str


def _line(data: dict) -> str:
    return json.dumps(data, ensure_ascii=False) + "\n"


def create_exchanges_router(app: Application) -> APIRouter:
    """Create exchanges router."""
    router = APIRouter(prefix="/api", tags=["exchanges"])

    @router.post("/exchanges")
    async def send_exchange(request: ExchangeRequest) -> StreamingResponse:
        """Send a message; streams NDJSON snapshots followed by the result."""
        if app.exchange_active:
            raise HTTPException(status_code=409, detail="Another exchange is still streaming")

        try:
            config = ExchangeConfig(
                model_id=request.model_id,
                system_prompt=request.system_prompt,
                temperature=request.temperature,
                test_mode=request.test_mode,
            )
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))

        attachments = [
            Attachment(name=a.name, content=a.content, size=a.size, ext=a.ext)
            for a in request.attachments
        ]
        updates: asyncio.Queue[str] = asyncio.Queue()
        exchange = asyncio.create_task(
            app.send_exchange(request.text, attachments, config, on_update=updates.put_nowait)
        )

        async def stream():
            try:
                while True:
                    getter = asyncio.ensure_future(updates.get())
                    done, _ = await asyncio.wait(
                        {getter, exchange}, return_when=asyncio.FIRST_COMPLETED
                    )
                    if getter in done:
                        yield _line({"type": "update", "text": getter.result()})
                        continue
                    getter.cancel()
                    break

                while not updates.empty():
                    yield _line({"type": "update", "text": updates.get_nowait()})

                try:
                    result = exchange.result()
                except EngineError as e:
                    yield _line({"type": "error", "error": e.to_dict()})
                    return
                yield _line({"type": "result", **result.to_dict()})
            finally:
                if not exchange.done():
                    # Client went away: stop consuming the stream
                    app.cancel_exchange()

        return StreamingResponse(stream(), media_type="application/x-ndjson")

    @router.post("/exchanges/cancel", response_model=StatusResponse)
    async def cancel_exchange() -> dict:
        """Stop the active exchange."""
        if not app.cancel_exchange():
            raise HTTPException(status_code=404, detail="No active exchange")
        return {"status": "ok"}

    @router.get("/conversation", response_model=list[MessageResponse])
    async def get_conversation() -> list[dict]:
        """Messages of the current session."""
        return [
            {
                "id": m.id,
                "role": m.role,
                "content": m.content,
                "created_at": m.created_at.isoformat(),
            }
            for m in app.conversation.get_all()
        ]

    return router
