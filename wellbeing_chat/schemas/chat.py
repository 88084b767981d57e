from pydantic import BaseModel, Field


# ---- Chat ----

class ChatRequest(BaseModel):
    # presence/blankness is checked by ChatService so the error is a uniform 400
    message: str | None = Field(None, max_length=8000)
    userId: str | None = None
    conversationId: str | None = None
    guest: bool = False


class ChatResponse(BaseModel):
    response: str
    conversationId: str


# ---- Message history (GET) ----

class MessageOut(BaseModel):
    id: str
    userId: str
    conversationId: str
    role: str  # "user" | "assistant"
    text: str
    timestamp: str | None = None


# ---- Recipe ----

class RecipeRequest(BaseModel):
    prompt: str | None = None


class RecipeResponse(BaseModel):
    preparationMethod: str
    nutritionalInformation: str
