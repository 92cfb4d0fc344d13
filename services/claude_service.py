"""
Claude API Service - handles all interactions with Claude.

This service is pure Python with no Streamlit dependencies,
making it easy to test and reuse across different contexts.
"""

import base64
import logging
from typing import Optional

import anthropic

from config.settings import get_settings
from models.chat import CookingSession, ImageAnalysis
from models.chefs import ChefAgent
from models.user_preferences import DEFAULT_UNMUTE_INSTRUCTIONS

logger = logging.getLogger(__name__)


class ClaudeService:
    """Service for interacting with Claude API."""

    CHEF_SYSTEM_PROMPT = """You are {chef_name}, a professional chef assistant specializing in {specialty}.

Your personality: {personality}

You are helping with cooking in real-time. Provide:
1. Clear, step-by-step guidance
2. Safety tips when relevant
3. Ingredient substitutions if needed
4. Cooking techniques and tips
5. Encouragement and support

Keep responses concise but helpful (2-3 paragraphs max). If the user is cooking Nigerian food, incorporate traditional techniques and cultural context.

Current session: {session_name}
Current step: {current_step} of {total_steps}
"""

    IMAGE_SYSTEM_PROMPT = """You are {chef_name}, a professional chef assistant. Analyze cooking images and provide helpful guidance. Focus on:
1. Identifying ingredients and their quality
2. Cooking technique assessment
3. Next steps or improvements
4. Safety considerations
5. Nigerian cuisine expertise when relevant

Respond in a warm, encouraging tone with specific, actionable advice. Keep responses concise but helpful.
"""

    VOICE_SYSTEM_PROMPT = """{instructions}

IMPORTANT: Your responses will be read aloud by text-to-speech. Do NOT use any markdown formatting like asterisks, bold, or bullet points. Write in plain, natural sentences that sound good when spoken.
"""

    DEFAULT_IMAGE_PROMPT = "Please analyze this cooking image and provide guidance."

    def __init__(self, client: Optional[anthropic.Anthropic] = None):
        settings = get_settings()
        self.client = client or anthropic.Anthropic(api_key=settings.anthropic_api_key)
        self.model = settings.claude_model

    def complete(self, system: str, messages: list[dict], max_tokens: int = 500) -> str:
        """
        Low-level call to the Messages API.

        Returns:
            The text blocks of the response, joined
        """
        response = self.client.messages.create(
            model=self.model,
            max_tokens=max_tokens,
            system=system,
            messages=messages,
        )
        return "".join(block.text for block in response.content if block.type == "text").strip()

    def chat_chef(
        self,
        message: str,
        history: list[dict],
        chef: ChefAgent,
        session: Optional[CookingSession] = None,
        image: Optional[bytes] = None,
        media_type: str = "image/jpeg",
    ) -> str:
        """
        Send a message to a chef assistant.

        Args:
            message: User's message
            history: Previous messages [{"role": "user/assistant", "content": "..."}]
            chef: The selected chef persona
            session: Active cooking session, if any
            image: Optional photo to send along with the message

        Returns:
            The chef's reply
        """
        system = self.CHEF_SYSTEM_PROMPT.format(
            chef_name=chef.name,
            specialty=chef.specialty,
            personality=chef.personality,
            session_name=session.recipe_name if session else "General cooking assistance",
            current_step=session.current_step if session else 1,
            total_steps=session.total_steps if session else 10,
        )

        if image:
            content = [
                {"type": "text", "text": message},
                self._image_block(image, media_type),
            ]
        else:
            content = message

        messages = self._prepare_history(history) + [{"role": "user", "content": content}]
        return self.complete(system, self._merge_turns(messages), max_tokens=800)

    def analyze_image(
        self,
        image: bytes,
        chef: ChefAgent,
        media_type: str = "image/jpeg",
        prompt: Optional[str] = None,
    ) -> ImageAnalysis:
        """Ask the chef to look at a cooking photo."""
        messages = [{
            "role": "user",
            "content": [
                {"type": "text", "text": prompt or self.DEFAULT_IMAGE_PROMPT},
                self._image_block(image, media_type),
            ],
        }]
        guidance = self.complete(
            self.IMAGE_SYSTEM_PROMPT.format(chef_name=chef.name),
            messages,
            max_tokens=800,
        )
        logger.info(f"Image analysis completed ({len(image)} bytes)")
        return ImageAnalysis(guidance=guidance)

    def voice_reply(self, message: str, history: list[dict], instructions: Optional[str] = None) -> str:
        """Short, speakable reply for voice conversations."""
        system = self.VOICE_SYSTEM_PROMPT.format(instructions=instructions or DEFAULT_UNMUTE_INSTRUCTIONS)
        messages = self._prepare_history(history) + [{"role": "user", "content": message}]
        return self.complete(system, self._merge_turns(messages), max_tokens=300)

    @staticmethod
    def _image_block(image: bytes, media_type: str) -> dict:
        return {
            "type": "image",
            "source": {
                "type": "base64",
                "media_type": media_type,
                "data": base64.b64encode(image).decode("ascii"),
            },
        }

    @staticmethod
    def _prepare_history(history: list[dict]) -> list[dict]:
        """Drop leading assistant turns; the API expects a user turn first."""
        messages = [
            {"role": m["role"], "content": m["content"]}
            for m in history
            if m.get("role") in ("user", "assistant") and m.get("content")
        ]
        while messages and messages[0]["role"] != "user":
            messages.pop(0)
        return messages

    @staticmethod
    def _merge_turns(messages: list[dict]) -> list[dict]:
        """Merge consecutive text turns from the same role."""
        merged: list[dict] = []
        for message in messages:
            if (
                merged
                and merged[-1]["role"] == message["role"]
                and isinstance(merged[-1]["content"], str)
                and isinstance(message["content"], str)
            ):
                merged[-1] = {
                    "role": message["role"],
                    "content": f"{merged[-1]['content']}\n\n{message['content']}",
                }
            else:
                merged.append(message)
        return merged
