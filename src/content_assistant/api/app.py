"""FastAPI application exposing the assistant over HTTP."""

import logging
from typing import Annotated

from fastapi import Depends, FastAPI, Header, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse

from content_assistant.config import AssistantSettings, resolve_config
from content_assistant.executor import ContentAssistant, create_assistant

from .identity import AnonymousResolver, IdentityResolver
from .schemas import GenerateContentRequest, HistoryItem
from .sse import SSE_HEADERS, event_stream

logger = logging.getLogger(__name__)


def create_app(
    assistant: ContentAssistant | None = None,
    *,
    identity: IdentityResolver | None = None,
    settings: AssistantSettings | None = None,
) -> FastAPI:
    """Build the application.

    Args:
        assistant: Pipeline to serve; created from ``settings`` when omitted.
        identity: Maps the Authorization header to an owner id. Defaults to
            anonymous, in which case ``/history`` always answers 401.
        settings: Used for CORS and, when needed, to build the assistant.
    """
    if settings is None:
        settings = assistant.config if assistant is not None else resolve_config()
    assistant = assistant or create_assistant(settings)
    identity = identity or AnonymousResolver()

    app = FastAPI(title="Content Assistant")
    app.state.assistant = assistant
    app.state.identity = identity

    origins = settings.cors_origin_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    async def current_owner(
        authorization: Annotated[str | None, Header()] = None,
    ) -> str | None:
        return await identity.resolve(authorization)

    @app.get("/health")
    def health_check() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/generate-content")
    async def generate_content(
        body: GenerateContentRequest,
        owner_id: Annotated[str | None, Depends(current_owner)],
    ) -> StreamingResponse:
        logger.info(
            "generate-content request (%s)",
            "authenticated" if owner_id else "anonymous",
        )
        events = assistant.stream(body.to_fields(), owner_id=owner_id)
        return StreamingResponse(
            event_stream(events),
            media_type="text/event-stream",
            headers=SSE_HEADERS,
        )

    @app.get("/history", response_model=list[HistoryItem])
    async def list_history(
        owner_id: Annotated[str | None, Depends(current_owner)],
    ) -> list[HistoryItem]:
        if owner_id is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Sign in to view history.",
            )
        entries = await assistant.history.list(owner_id)
        return [HistoryItem.from_entry(entry) for entry in entries]

    return app
