"""
Response Orchestrator

Produces the therapeutic text response for a check-in.

ARCHITECTURE:
    sample -> AI attempt -> confidence gate -> ai | hybrid
           +-> template (not sampled, unconfigured, or provider error)

Generative calls are never retried. Reliability comes from the
template fallback, not from repetition.

CLINICAL_REVIEW_REQUIRED: Confidence vocabulary and deny-list are
heuristics and should be reviewed with clinicians.
"""

import random
from collections import deque
from dataclasses import dataclass, field, replace
from typing import Callable, Optional
from uuid import UUID

from aura.config.logging_config import get_logger
from aura.config.settings import OrchestratorSettings
from aura.domain.enums.check_in import MoodTag, ResponseSource, Tone
from aura.domain.exceptions import TransportError
from aura.infrastructure.llm.provider import LLMProvider
from aura.infrastructure.metrics.prometheus_metrics import RESPONSE_SOURCE_TOTAL, track_stage
from aura.services.orchestration.templates import (
    build_suggestions,
    build_video_script,
    compose_template,
    has_closing,
    has_opening,
    split_sentences,
)
from aura.services.prompt.prompt_builder import PromptBuilder
from aura.services.prompt.themes import detect_themes

logger = get_logger(__name__)


# Each distinct term found adds 1/3 to confidence
THERAPEUTIC_VOCABULARY: tuple[str, ...] = (
    "it sounds like",
    "it makes sense",
    "i hear",
    "valid",
    "understandable",
    "feel",
    "notice",
    "gentle",
    "support",
    "reflect",
    "courage",
    "compassion",
    "kind to yourself",
    "breath",
)

# Any of these forces confidence to 0. Stricter than, and separate
# from, the crisis gate vocabulary.
CLINICAL_DENY_LIST: tuple[str, ...] = (
    "diagnosis",
    "diagnose",
    "medication",
    "prescription",
    "prescribe",
    "dosage",
    "disorder",
    "crisis",
)

TEMPLATE_FALLBACK_CONFIDENCE = 0.85
HYBRID_TEMPLATE_BASELINE = 0.8


@dataclass(frozen=True)
class OrchestratorConfig:
    """
    Immutable orchestrator policy.

    Attributes:
        ai_attempt_percentage: Chance (0-100) of attempting AI generation
        confidence_threshold: Minimum confidence to use AI output as-is
        max_suggestions: Suggestion cap
        template_confidence: Confidence reported for template-only output
        hybrid_template_baseline: Template side of the hybrid confidence mean
    """

    ai_attempt_percentage: int = 70
    confidence_threshold: float = 0.6
    max_suggestions: int = 3
    template_confidence: float = TEMPLATE_FALLBACK_CONFIDENCE
    hybrid_template_baseline: float = HYBRID_TEMPLATE_BASELINE

    def __post_init__(self) -> None:
        if not 0 <= self.ai_attempt_percentage <= 100:
            raise ValueError("ai_attempt_percentage must be within 0..100")
        if not 0.0 <= self.confidence_threshold <= 1.0:
            raise ValueError("confidence_threshold must be within 0..1")
        if self.max_suggestions < 1:
            raise ValueError("max_suggestions must be at least 1")

    @classmethod
    def from_settings(cls, settings: OrchestratorSettings) -> "OrchestratorConfig":
        return cls(
            ai_attempt_percentage=settings.ai_attempt_percentage,
            confidence_threshold=settings.confidence_threshold,
        )


@dataclass(frozen=True)
class OrchestratedResponse:
    """
    Final response for one check-in.

    Attributes:
        text: Response text shown and spoken to the user
        source: ai, hybrid, or template
        confidence: Confidence reported for the final text
        ai_confidence: Raw confidence of the AI candidate (None if no AI text)
        suggestions: Up to three follow-up suggestions
        video_script: Script variant for the video persona
        segments: The three blended segments for hybrid output
    """

    text: str
    source: ResponseSource
    confidence: float
    ai_confidence: Optional[float] = None
    suggestions: tuple[str, ...] = field(default_factory=tuple)
    video_script: str = ""
    segments: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "source": self.source.value,
            "confidence": round(self.confidence, 3),
            "ai_confidence": None if self.ai_confidence is None else round(self.ai_confidence, 3),
            "suggestions": list(self.suggestions),
            "video_script": self.video_script,
        }


class ResponseHistory:
    """Recent final responses per user, newest first."""

    def __init__(self, max_size: int = 10, window: int = 3) -> None:
        self._max_size = max_size
        self._window = window
        self._by_user: dict[str, deque[str]] = {}

    def _key(self, user_id: Optional[UUID]) -> str:
        return str(user_id) if user_id else "anonymous"

    def add(self, user_id: Optional[UUID], text: str) -> None:
        history = self._by_user.setdefault(self._key(user_id), deque(maxlen=self._max_size))
        history.appendleft(text)

    def is_repetitive(self, user_id: Optional[UUID], text: str) -> bool:
        history = self._by_user.get(self._key(user_id))
        if not history:
            return False
        return text in list(history)[: self._window]


def score_confidence(text: str) -> float:
    """
    Heuristic appropriateness score in [0, 1].

    min(1, distinct therapeutic terms / 3), or 0 if any deny-listed
    clinical term appears.
    """
    lowered = text.lower()
    if any(term in lowered for term in CLINICAL_DENY_LIST):
        return 0.0
    matches = sum(1 for term in THERAPEUTIC_VOCABULARY if term in lowered)
    return min(1.0, matches / 3)


def _thirds(text: str) -> list[str]:
    sentences = split_sentences(text)
    units, joiner = (sentences, " ") if len(sentences) >= 3 else (text.split(), " ")
    n = len(units)
    a, b = n // 3, (2 * n) // 3
    return [joiner.join(units[:a]), joiner.join(units[a:b]), joiner.join(units[b:])]


def blend_hybrid(ai_text: str, template_text: str) -> tuple[str, str, str]:
    """
    Blend AI and template candidates into three segments.

    Opening: AI third if it carries a therapeutic opening, else template.
    Middle: always the template third.
    Closing: AI third if it carries an insight closing, else template.

    The template always splits into three non-empty sentence thirds,
    so every returned segment is non-empty.
    """
    ai_open, _, ai_close = _thirds(ai_text)
    tpl_open, tpl_middle, tpl_close = _thirds(template_text)

    opening = ai_open if ai_open and has_opening(ai_open) else tpl_open
    closing = ai_close if ai_close and has_closing(ai_close) else tpl_close
    return opening, tpl_middle, closing


class ResponseOrchestrator:
    """
    Confidence-gated AI/template response generation.

    Usage:
        orchestrator = ResponseOrchestrator(provider, OrchestratorConfig())
        response = await orchestrator.generate(MoodTag.ANXIOUS, transcript, Tone.CALM)

        stricter = orchestrator.reconfigure(confidence_threshold=0.8)
    """

    def __init__(
        self,
        provider: Optional[LLMProvider] = None,
        config: Optional[OrchestratorConfig] = None,
        prompt_builder: Optional[PromptBuilder] = None,
        rng: Callable[[], float] = random.random,
        history: Optional[ResponseHistory] = None,
    ) -> None:
        """
        Args:
            provider: Generative text provider; None means template only
            config: Orchestrator policy
            prompt_builder: Prompt builder
            rng: Uniform [0, 1) source used for the AI-attempt draw and suggestion rotation
            history: Shared per-user response history
        """
        self._provider = provider
        self._config = config or OrchestratorConfig()
        self._prompt_builder = prompt_builder or PromptBuilder()
        self._rng = rng
        self._history = history or ResponseHistory()

    @property
    def config(self) -> OrchestratorConfig:
        return self._config

    def reconfigure(self, **changes) -> "ResponseOrchestrator":
        """Return a new orchestrator with updated config; this one is unchanged."""
        return ResponseOrchestrator(
            provider=self._provider,
            config=replace(self._config, **changes),
            prompt_builder=self._prompt_builder,
            rng=self._rng,
            history=self._history,
        )

    def _should_attempt_ai(self) -> bool:
        if self._provider is None or not self._provider.is_configured():
            return False
        return self._rng() * 100 < self._config.ai_attempt_percentage

    async def generate(
        self,
        mood: MoodTag,
        transcript: str,
        tone: Tone = Tone.CALM,
        user_id: Optional[UUID] = None,
    ) -> OrchestratedResponse:
        """
        Produce the response for a reviewed check-in.

        Never raises for provider failures; those fall back to the
        template path.
        """
        # The attempt draw comes first so a scripted rng decides the branch
        attempt_ai = self._should_attempt_ai()
        template_text = compose_template(mood, tone, transcript)
        variant = int(self._rng() * 1_000_000)
        suggestions = tuple(
            build_suggestions(transcript, mood, variant, self._config.max_suggestions)
        )

        if not attempt_ai:
            return self._finish(
                user_id,
                mood,
                text=template_text,
                source=ResponseSource.TEMPLATE,
                confidence=self._config.template_confidence,
                suggestions=suggestions,
                reason="ai_not_attempted",
            )

        prompt = self._prompt_builder.build(transcript, mood, tone, detect_themes(transcript))
        try:
            with track_stage("generation"):
                llm_response = await self._provider.generate(prompt)
        except TransportError as e:
            logger.warning(
                "AI generation failed, using template",
                provider=e.provider,
                error=str(e),
            )
            return self._finish(
                user_id,
                mood,
                text=template_text,
                source=ResponseSource.TEMPLATE,
                confidence=self._config.template_confidence,
                suggestions=suggestions,
                reason="provider_error",
            )

        ai_text = llm_response.content.strip()
        ai_confidence = score_confidence(ai_text)
        if self._history.is_repetitive(user_id, ai_text):
            logger.info("AI response repeats recent history, treating as low confidence")
            ai_confidence = 0.0

        if ai_confidence >= self._config.confidence_threshold:
            return self._finish(
                user_id,
                mood,
                text=ai_text,
                source=ResponseSource.AI,
                confidence=ai_confidence,
                ai_confidence=ai_confidence,
                suggestions=suggestions,
                reason="confident",
            )

        segments = blend_hybrid(ai_text, template_text)
        return self._finish(
            user_id,
            mood,
            text=" ".join(segments),
            source=ResponseSource.HYBRID,
            confidence=(ai_confidence + self._config.hybrid_template_baseline) / 2,
            ai_confidence=ai_confidence,
            suggestions=suggestions,
            segments=segments,
            reason="low_confidence",
        )

    def _finish(
        self,
        user_id: Optional[UUID],
        mood: MoodTag,
        *,
        text: str,
        source: ResponseSource,
        confidence: float,
        suggestions: tuple[str, ...],
        reason: str,
        ai_confidence: Optional[float] = None,
        segments: tuple[str, ...] = (),
    ) -> OrchestratedResponse:
        self._history.add(user_id, text)
        RESPONSE_SOURCE_TOTAL.labels(source=source.value).inc()
        logger.info(
            "Response generated",
            source=source.value,
            reason=reason,
            confidence=round(confidence, 3),
        )
        return OrchestratedResponse(
            text=text,
            source=source,
            confidence=confidence,
            ai_confidence=ai_confidence,
            suggestions=suggestions,
            video_script=build_video_script(text, mood),
            segments=segments,
        )
