"""
Assistant API Endpoints

POST /api/v1/assistant/chat - Next reply for a client-held conversation
POST /api/v1/assistant/recommendations - Course recommendations for interests
POST /api/v1/assistant/study-tips - Study tips for a topic
POST /api/v1/assistant/quiz-questions - Multiple choice questions for a topic
"""
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from testcademy.exceptions import ValidationError
from testcademy.services.assistant import AssistantService, Conversation, get_assistant_service


router = APIRouter(prefix="/api/v1/assistant", tags=["assistant"])


class ChatMessage(BaseModel):
    role: str
    content: str


class ChatRequest(BaseModel):
    messages: List[ChatMessage] = Field(..., min_length=1)
    context: Optional[str] = None


class RecommendationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    interests: List[str] = Field(..., min_length=1)
    current_level: str = Field("beginner", alias="currentLevel")


class TopicRequest(BaseModel):
    topic: str = Field(..., min_length=1)
    difficulty: str = "beginner"
    count: int = Field(5, ge=1, le=20)


class AssistantResponse(BaseModel):
    """Standard response wrapper"""
    data: Dict[str, Any]


@router.post("/chat", response_model=AssistantResponse)
async def chat(request: ChatRequest, assistant: AssistantService = Depends(get_assistant_service)):
    """
    Generate the assistant's next message.

    The client sends the whole history and receives it back with the reply appended.
    """
    try:
        conversation = Conversation.from_dicts(m.model_dump() for m in request.messages)
    except ValueError as e:
        raise ValidationError(str(e), fields=["messages"])

    updated, reply = await assistant.reply(conversation, request.context)
    return AssistantResponse(data={
        "content": reply.content,
        "usage": reply.usage,
        "fallback": reply.fallback,
        "messages": updated.to_dicts(),
    })


@router.post("/recommendations", response_model=AssistantResponse)
async def recommendations(
    request: RecommendationRequest,
    assistant: AssistantService = Depends(get_assistant_service),
):
    text = await assistant.recommend_courses(request.interests, request.current_level)
    return AssistantResponse(data={"recommendations": text})


@router.post("/study-tips", response_model=AssistantResponse)
async def study_tips(request: TopicRequest, assistant: AssistantService = Depends(get_assistant_service)):
    text = await assistant.study_tips(request.topic, request.difficulty)
    return AssistantResponse(data={"tips": text})


@router.post("/quiz-questions", response_model=AssistantResponse)
async def quiz_questions(request: TopicRequest, assistant: AssistantService = Depends(get_assistant_service)):
    questions = await assistant.quiz_questions(request.topic, request.difficulty, request.count)
    return AssistantResponse(data={"questions": questions})
