"""
Chef assistant state models.

ChefAssistantState holds everything the assistant screen needs between
Streamlit reruns: the active cooking session, messages, the busy flags
and the user's assistant settings. Controllers keep one instance in
st.session_state; the model itself has no Streamlit dependency.
"""

import uuid
from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from models.chefs import ChefAgent, DEFAULT_CHEFS

DEFAULT_TOTAL_STEPS = 10

WELCOME_TEMPLATE = """Hello! I'm {chef_name}. I'm excited to help you cook {recipe_name}!

Let's start by showing me your ingredients or tell me what step you'd like to begin with. You can:

🍅 Take a photo of your ingredients
🎤 Ask me questions with voice
💬 Type your questions
📸 Show me your cooking progress

What would you like to do first?"""


def _new_id() -> str:
    return uuid.uuid4().hex


class AssistantMessage(BaseModel):
    """A message shown in the chef assistant chat."""
    id: str = Field(default_factory=_new_id)
    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime = Field(default_factory=datetime.now)
    image: Optional[bytes] = None
    audio: Optional[bytes] = None
    metadata: Optional[dict[str, Any]] = None


class ImageAnalysis(BaseModel):
    """Result of analysing a cooking photo."""
    confidence: float = 0.9
    detected_ingredients: list[str] = Field(default_factory=list)
    cooking_tips: list[str] = Field(default_factory=list)
    guidance: str = ""


class CookingSession(BaseModel):
    """An active guided cooking session."""
    id: str = Field(default_factory=_new_id)
    recipe_name: str
    start_time: datetime = Field(default_factory=datetime.now)
    current_step: int = 1
    total_steps: int = DEFAULT_TOTAL_STEPS
    is_active: bool = True


class ChefAssistantState(BaseModel):
    """State of the chef assistant screen."""
    current_session: Optional[CookingSession] = None
    messages: list[AssistantMessage] = Field(default_factory=list)
    is_typing: bool = False
    is_analyzing: bool = False
    is_listening: bool = False
    is_recording: bool = False
    last_analysis: Optional[ImageAnalysis] = None
    available_agents: list[ChefAgent] = Field(default_factory=lambda: list(DEFAULT_CHEFS))
    selected_agent: ChefAgent = Field(default_factory=lambda: DEFAULT_CHEFS[0])
    language: Literal["en", "yo", "ig", "ha"] = "en"
    voice_enabled: bool = True
    camera_analysis_enabled: bool = True

    @property
    def is_session_active(self) -> bool:
        return self.current_session is not None and self.current_session.is_active

    def start_session(self, recipe_name: str, total_steps: int = DEFAULT_TOTAL_STEPS) -> CookingSession:
        """Start a cooking session and post the chef's welcome message."""
        self.current_session = CookingSession(
            recipe_name=recipe_name,
            total_steps=max(1, total_steps),
        )
        self.messages = []
        self.add_message(
            "assistant",
            WELCOME_TEMPLATE.format(chef_name=self.selected_agent.name, recipe_name=recipe_name),
        )
        return self.current_session

    def end_session(self):
        """End the session and clear transient state."""
        self.current_session = None
        self.messages = []
        self.is_analyzing = False
        self.is_listening = False
        self.is_recording = False
        self.is_typing = False

    def add_message(
        self,
        role: str,
        content: str,
        image: Optional[bytes] = None,
        audio: Optional[bytes] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> AssistantMessage:
        message = AssistantMessage(role=role, content=content, image=image, audio=audio, metadata=metadata)
        self.messages.append(message)
        return message

    def advance_step(self) -> int:
        """Move to the next step, never past the last one."""
        if not self.current_session:
            return 0
        session = self.current_session
        session.current_step = min(session.current_step + 1, session.total_steps)
        return session.current_step

    def select_agent(self, agent_id: str) -> ChefAgent:
        """Select a chef by ID. Raises KeyError for unknown IDs."""
        for agent in self.available_agents:
            if agent.id == agent_id:
                self.selected_agent = agent
                return agent
        raise KeyError(f"Unknown chef: {agent_id}")

    def update_settings(self, **settings) -> None:
        """Update language / voice_enabled / camera_analysis_enabled."""
        allowed = {"language", "voice_enabled", "camera_analysis_enabled"}
        unknown = set(settings) - allowed
        if unknown:
            raise KeyError(f"Unknown settings: {', '.join(sorted(unknown))}")
        for key, value in settings.items():
            setattr(self, key, value)

    def clear_messages(self):
        self.messages = []

    def history_for_llm(self) -> list[dict]:
        """Text-only chat history in the Anthropic messages format."""
        return [{"role": m.role, "content": m.content} for m in self.messages]
