"""Chat session endpoints."""

from fastapi import APIRouter, HTTPException, Response, status

from pickleai.core.context.models import UserContext

from .deps import APIConfigDep, SessionRegistryDep
from .models import SendMessageRequest, SessionResponse

router = APIRouter(prefix="/api/v1", tags=["chat"])


@router.post(
    "/sessions", status_code=status.HTTP_201_CREATED, response_model=SessionResponse
)
async def create_session(registry: SessionRegistryDep) -> SessionResponse:
    """Open a conversation seeded with the welcome message."""
    session_id, session = registry.create()
    return SessionResponse.from_state(session_id, session.get_state())


@router.get("/sessions/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str, registry: SessionRegistryDep) -> SessionResponse:
    return SessionResponse.from_state(session_id, registry.get(session_id).get_state())


@router.post("/sessions/{session_id}/messages", response_model=SessionResponse)
async def send_message(
    session_id: str,
    body: SendMessageRequest,
    registry: SessionRegistryDep,
    api_config: APIConfigDep,
) -> SessionResponse:
    """Run one turn and return the updated session.

    Refusals arrive as assistant messages; model failures are reported in
    ``error`` with a 200 status so the client can show them and retry.
    """
    if len(body.content) > api_config.max_message_length:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Message exceeds {api_config.max_message_length} characters",
        )
    async with registry.exclusive(session_id) as session:
        await session.send_message(body.content, body.user_id)
        return SessionResponse.from_state(session_id, session.get_state())


@router.patch("/sessions/{session_id}/context", response_model=SessionResponse)
async def update_context(
    session_id: str, context: UserContext, registry: SessionRegistryDep
) -> SessionResponse:
    """Merge explicitly provided context fields (e.g. from a form)."""
    async with registry.exclusive(session_id) as session:
        session.update_user_context(context)
        return SessionResponse.from_state(session_id, session.get_state())


@router.delete("/sessions/{session_id}/messages", response_model=SessionResponse)
async def clear_messages(session_id: str, registry: SessionRegistryDep) -> SessionResponse:
    async with registry.exclusive(session_id) as session:
        session.clear_messages()
        return SessionResponse.from_state(session_id, session.get_state())


@router.delete("/sessions/{session_id}/error", response_model=SessionResponse)
async def clear_error(session_id: str, registry: SessionRegistryDep) -> SessionResponse:
    async with registry.exclusive(session_id) as session:
        session.clear_error()
        return SessionResponse.from_state(session_id, session.get_state())


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(session_id: str, registry: SessionRegistryDep) -> Response:
    registry.remove(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
