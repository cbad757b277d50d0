"""
Assistant Service

Thin client for the Together AI chat-completions API used by the chat widget
and the admin assistant panel. When no API key is configured, or the API call
fails, a canned fallback answer is returned instead of an error.

Conversation history is owned by the caller: each request builds a
Conversation from the messages it was sent and gets back a new Conversation
with the assistant's reply appended.
"""
import json
import logging
import random
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

import httpx

from testcademy.config import settings

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful assistant for TestCademy, an online software testing academy. "
    "You help students with questions about software testing, course content, enrollment, "
    "and general queries. Be friendly, professional, and encouraging. If you don't know "
    "something specific about our courses, suggest they contact our support team."
)

FALLBACK_RESPONSES = [
    "Thank you for your message! I'm here to help with questions about our software testing "
    "courses. For specific course details or enrollment, please contact our support team.",
    "I'd be happy to assist you with software testing questions! If you need help with course "
    "enrollment or have specific questions about our curriculum, feel free to ask.",
    "Welcome to TestCademy! I can help answer questions about software testing concepts, our "
    "course offerings, and learning paths. What would you like to know?",
    "Thanks for reaching out! I'm here to support your learning journey in software testing. "
    "How can I help you today?",
]

EMPTY_REPLY = "Sorry, I could not generate a response."

VALID_ROLES = {"user", "assistant", "system"}

JSON_ARRAY = re.compile(r"\[[\s\S]*\]")


@dataclass(frozen=True)
class Message:
    role: str
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class Conversation:
    """Append-only, ordered chat history for one session"""
    messages: Tuple[Message, ...] = ()

    @classmethod
    def from_dicts(cls, items: Iterable[Dict[str, Any]]) -> "Conversation":
        messages = []
        for item in items:
            role = str(item.get("role", "")).strip()
            if role not in VALID_ROLES:
                raise ValueError(f"Invalid message role: {role!r}")
            messages.append(Message(role=role, content=str(item.get("content", ""))))
        return cls(tuple(messages))

    def append(self, role: str, content: str) -> "Conversation":
        return Conversation(self.messages + (Message(role=role, content=content),))

    def to_dicts(self) -> List[Dict[str, str]]:
        return [message.to_dict() for message in self.messages]

    def __len__(self):
        return len(self.messages)


@dataclass
class AssistantReply:
    content: str
    usage: Dict[str, int] = field(default_factory=lambda: {
        "prompt_tokens": 0,
        "completion_tokens": 0,
        "total_tokens": 0,
    })
    fallback: bool = False


class AssistantService:
    """Chat completions with a fallback when the API is unavailable"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = settings.together_api_key if api_key is None else api_key
        self.api_url = api_url or settings.together_api_url
        self.model = model or settings.assistant_model
        self.timeout = timeout or settings.assistant_timeout_seconds
        self.transport = transport

    def fallback_reply(self) -> AssistantReply:
        return AssistantReply(content=random.choice(FALLBACK_RESPONSES), fallback=True)

    def _system_prompt(self, context: Optional[str]) -> str:
        if context:
            return f"{SYSTEM_PROMPT}\n\nContext: {context}"
        return SYSTEM_PROMPT

    async def generate(self, conversation: Conversation, context: Optional[str] = None) -> AssistantReply:
        """
        Ask the chat API for the next assistant message.

        Args:
            conversation: History so far, ending with the user's message
            context: Optional extra context appended to the system prompt

        Returns:
            AssistantReply; fallback=True when the API was not used
        """
        if not self.api_key:
            logger.debug("No assistant API key configured, using fallback response")
            return self.fallback_reply()

        payload = {
            "model": self.model,
            "messages": [{"role": "system", "content": self._system_prompt(context)}]
            + conversation.to_dicts(),
            "max_tokens": 500,
            "temperature": 0.7,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.api_url, json=payload, headers=headers)
                response.raise_for_status()
                data = response.json()

            choices = data.get("choices") or []
            content = ""
            if choices:
                content = (choices[0].get("message") or {}).get("content") or ""
            usage = data.get("usage") or {}

            return AssistantReply(
                content=content or EMPTY_REPLY,
                usage={
                    "prompt_tokens": int(usage.get("prompt_tokens", 0)),
                    "completion_tokens": int(usage.get("completion_tokens", 0)),
                    "total_tokens": int(usage.get("total_tokens", 0)),
                },
            )

        except (httpx.HTTPError, ValueError, AttributeError, TypeError) as e:
            logger.error(f"Assistant API call failed: {e}")
            return self.fallback_reply()

    async def reply(
        self,
        conversation: Conversation,
        context: Optional[str] = None,
    ) -> Tuple[Conversation, AssistantReply]:
        """Generate a reply and return the conversation with it appended"""
        answer = await self.generate(conversation, context)
        return conversation.append("assistant", answer.content), answer

    async def recommend_courses(self, interests: List[str], current_level: str = "beginner") -> str:
        conversation = Conversation().append(
            "user",
            f"I'm interested in: {', '.join(interests)}. My current level is: {current_level}. "
            f"Please recommend software testing courses and learning paths that would be "
            f"suitable for me. Keep the response concise and practical.",
        )
        return (await self.generate(conversation)).content

    async def study_tips(self, topic: str, difficulty: str = "beginner") -> str:
        conversation = Conversation().append(
            "user",
            f"I'm studying {topic} at {difficulty} level. Please provide practical study tips "
            f"and resources to help me learn effectively.",
        )
        return (await self.generate(conversation)).content

    async def quiz_questions(
        self,
        topic: str,
        difficulty: str = "beginner",
        count: int = 5,
    ) -> List[Dict[str, Any]]:
        """
        Multiple choice questions generated by the model.

        Returns a single generic question if the reply holds no parseable JSON array.
        """
        conversation = Conversation().append(
            "user",
            f"Generate {count} multiple choice questions about {topic} for {difficulty} level "
            f"students. Format as JSON with question, options array, and correct answer "
            f"index (0-based).",
        )
        answer = await self.generate(conversation)

        match = JSON_ARRAY.search(answer.content)
        if match:
            try:
                questions = json.loads(match.group(0))
                if isinstance(questions, list) and questions:
                    return questions
            except json.JSONDecodeError as e:
                logger.warning(f"Could not parse quiz questions: {e}")

        return [
            {
                "question": f"What is the primary goal of {topic}?",
                "options": [
                    "To find bugs",
                    "To improve code quality",
                    "To ensure requirements are met",
                    "All of the above",
                ],
                "correct": 3,
            }
        ]


def get_assistant_service() -> AssistantService:
    """FastAPI dependency returning an AssistantService built from settings"""
    return AssistantService()
