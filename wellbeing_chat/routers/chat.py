"""
Chat endpoints:
- POST /api/chat — one turn with the well-being assistant (guest turns are not stored)
- GET /api/messages — stored turns for a user, oldest first
- POST /api/recipe — recipe suggestion from ingredients (not stored)
"""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from wellbeing_chat.database import get_db
from wellbeing_chat.schemas.chat import (
    ChatRequest,
    ChatResponse,
    MessageOut,
    RecipeRequest,
    RecipeResponse,
)
from wellbeing_chat.services.chat_service import ChatService
from wellbeing_chat.services.llm_client import LLMClient
from wellbeing_chat.services.recipe_service import generate_recipe

router = APIRouter(prefix="/api", tags=["chat"])


# ---------- Dependencies: process-wide LLM client + per-request ChatService ----------


def get_llm_client(request: Request) -> LLMClient:
    return request.app.state.llm_client


def get_chat_service(
    request: Request,
    llm_client: LLMClient = Depends(get_llm_client),
) -> ChatService:
    resolver = getattr(request.app.state, "conversation_resolver", None)
    return ChatService(llm_client, resolver=resolver)


# ---------- Chat ----------


@router.post("/chat", response_model=ChatResponse)
async def chat(
    body: ChatRequest,
    db: Session = Depends(get_db),
    chat_service: ChatService = Depends(get_chat_service),
):
    """Send one message; returns the assistant reply and the conversation it was filed under."""
    result = await chat_service.handle_message(
        db,
        body.userId,
        body.message,
        conversation_id=body.conversationId,
        guest=body.guest,
    )
    return ChatResponse(**result)


@router.get("/messages", response_model=list[MessageOut])
async def list_messages(
    userId: str | None = None,
    conversationId: str | None = None,
    db: Session = Depends(get_db),
    chat_service: ChatService = Depends(get_chat_service),
):
    """Stored turns for userId (optionally one conversation), ordered by timestamp asc."""
    messages = await chat_service.list_messages(db, userId, conversationId)
    return [MessageOut(**m) for m in messages]


# ---------- Recipe ----------


@router.post("/recipe", response_model=RecipeResponse)
async def recipe(
    body: RecipeRequest,
    llm_client: LLMClient = Depends(get_llm_client),
):
    return RecipeResponse(**await generate_recipe(llm_client, body.prompt))
