"""
Prompt Builder

Builds the generative prompt for a voice check-in.

The system prompt tells the model that the words were spoken
aloud, lists the detected themes, and constrains the response to
validation and reflection rather than advice.

CLINICAL_REVIEW_REQUIRED: Prompt wording should be reviewed by
mental health professionals.
"""

from dataclasses import dataclass
from typing import Optional

from aura.domain.enums.check_in import MoodTag, Tone
from aura.services.prompt.themes import detect_themes


@dataclass
class BuiltPrompt:
    """
    Complete prompt ready for a generative provider.

    Attributes:
        system_prompt: Instructions and persona
        user_message: The user's transcribed words
        max_tokens: Suggested max tokens for the response
        temperature: Suggested sampling temperature
    """

    system_prompt: str
    user_message: str = ""
    max_tokens: int = 600
    temperature: float = 0.7

    def to_messages(self) -> list[dict]:
        """OpenAI-style chat messages."""
        messages = [{"role": "system", "content": self.system_prompt}]
        if self.user_message:
            messages.append({"role": "user", "content": self.user_message})
        return messages

    def to_single_prompt(self) -> str:
        """Flattened prompt for providers without a system role."""
        return f"{self.system_prompt}\n\n---\n\nUser (spoken): {self.user_message}"


class PromptBuilder:
    """
    Builds check-in prompts.

    Usage:
        builder = PromptBuilder(max_tokens=600, temperature=0.7)
        prompt = builder.build(transcript, MoodTag.ANXIOUS, Tone.CALM)
    """

    # CLINICAL_REVIEW_REQUIRED
    BASE_SYSTEM_PROMPT: str = """You are a compassionate and empathetic AI therapy assistant named 'Aura'.
Your goal is to make the user feel heard, validated, and deeply understood.
You NEVER give direct advice. Instead, you ask gentle, open-ended questions to guide reflection.

SAFETY RULES (NON-NEGOTIABLE):
- NEVER diagnose or name a condition
- NEVER mention medication, dosages, or prescriptions
- NEVER claim to replace professional care

IMPORTANT: The user just shared their thoughts through a VOICE RECORDING.
They spoke these words aloud, which makes this a more personal and vulnerable moment than written text."""

    TONE_GUIDANCE: dict[Tone, str] = {
        Tone.CALM: "Use a slow, soothing, grounding voice.",
        Tone.MOTIVATIONAL: "Use an encouraging, energizing voice that highlights their strengths.",
        Tone.REFLECTIVE: "Use a thoughtful, curious voice that invites them to look inward.",
    }

    TASK_PROMPT: str = """Craft a response that:
1. Acknowledges that they shared this through their voice
2. Validates their feelings directly and with warmth
3. Reflects back what you heard in their words
4. Offers ONE insightful, open-ended question to encourage deeper reflection
5. Maintains a warm, supportive, non-judgmental tone

Keep the response between 150 and 300 words."""

    def __init__(self, max_tokens: int = 600, temperature: float = 0.7) -> None:
        self._max_tokens = max_tokens
        self._temperature = temperature

    def build(
        self,
        transcript: str,
        mood: MoodTag,
        tone: Tone,
        themes: Optional[list[str]] = None,
    ) -> BuiltPrompt:
        """
        Build the prompt for one check-in.

        Args:
            transcript: Reviewed transcript
            mood: Mood selected by the user
            tone: Preferred response tone
            themes: Pre-computed themes (detected from transcript if omitted)

        Returns:
            BuiltPrompt ready for a provider
        """
        if themes is None:
            themes = detect_themes(transcript)

        sections = [
            self.BASE_SYSTEM_PROMPT,
            f"The user says they are feeling {mood.value}.",
        ]
        if themes:
            readable = ", ".join(t.replace("_", " ") for t in themes)
            sections.append(f"From their voice recording, I can sense themes of: {readable}.")
        sections.append(self.TONE_GUIDANCE[tone])
        sections.append(self.TASK_PROMPT)

        return BuiltPrompt(
            system_prompt="\n\n".join(sections),
            user_message=transcript,
            max_tokens=self._max_tokens,
            temperature=self._temperature,
        )
