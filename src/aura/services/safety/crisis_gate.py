"""
Crisis Gate

Scores a reviewed transcript for crisis risk and decides whether
the check-in may continue.

Scoring is a pure function: case-insensitive substring matches
against a fixed risk vocabulary, severity = min(10, matches * k).

Decision policy (configurable):
    severity < 2      -> no action
    2 <= severity < 5 -> resources available, non-interrupting
    5 <= severity < 8 -> safety interstitial, continuation allowed
    severity >= 8     -> HALT until explicit re-consent

A crisis flag is recorded whenever severity >= 3, independent of
the halt decision. Flag writes are fire-and-forget.

SAFETY-CRITICAL: A halt outranks every other control path,
including error recovery. It is never retried, overridden, or
silently skipped.

CLINICAL_REVIEW_REQUIRED: The vocabulary and thresholds are
heuristics, not clinically validated instruments.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Optional
from uuid import UUID

from aura.config.logging_config import get_logger
from aura.config.settings import CrisisSettings
from aura.domain.models.entry import CrisisFlag
from aura.infrastructure.database.repositories.crisis_flag_store import CrisisFlagStore
from aura.infrastructure.metrics.prometheus_metrics import (
    CRISIS_DECISIONS_TOTAL,
    CRISIS_FLAGS_TOTAL,
)
from aura.services.background import BackgroundTaskRegistry

logger = get_logger(__name__)


# Matched as lowercase substrings; each distinct term counts once
RISK_VOCABULARY: tuple[str, ...] = (
    "suicide",
    "suicidal",
    "kill myself",
    "end it all",
    "end my life",
    "want to die",
    "better off dead",
    "self harm",
    "self-harm",
    "hurt myself",
    "cutting",
    "overdose",
    "can't go on",
    "no reason to live",
    "hopeless",
    "worthless",
)


class CrisisAction(StrEnum):
    """What the presentation layer should do with a decision."""

    NONE = "none"
    RESOURCES = "resources"
    INTERSTITIAL = "interstitial"
    HALT = "halt"


@dataclass(frozen=True)
class CrisisPolicy:
    """
    Crisis gate constants.

    Attributes:
        severity_multiplier: k in severity = matches * k (>= 2 so one match reaches resources)
        resources_threshold: Lowest severity that offers resources
        interstitial_threshold: Lowest severity that shows the interstitial
        halt_threshold: Lowest severity that halts the pipeline
        flag_threshold: Lowest severity that records a crisis flag
    """

    severity_multiplier: int = 2
    resources_threshold: int = 2
    interstitial_threshold: int = 5
    halt_threshold: int = 8
    flag_threshold: int = 3

    def __post_init__(self) -> None:
        if self.severity_multiplier < 2:
            raise ValueError("severity_multiplier must be at least 2")
        if not (
            0 < self.resources_threshold
            <= self.interstitial_threshold
            <= self.halt_threshold
            <= 10
        ):
            raise ValueError("Crisis thresholds must be ordered within 1..10")

    @classmethod
    def from_settings(cls, settings: CrisisSettings) -> "CrisisPolicy":
        return cls(
            severity_multiplier=settings.severity_multiplier,
            resources_threshold=settings.resources_threshold,
            interstitial_threshold=settings.interstitial_threshold,
            halt_threshold=settings.halt_threshold,
            flag_threshold=settings.flag_threshold,
        )

    def action_for(self, severity: int) -> CrisisAction:
        if severity >= self.halt_threshold:
            return CrisisAction.HALT
        if severity >= self.interstitial_threshold:
            return CrisisAction.INTERSTITIAL
        if severity >= self.resources_threshold:
            return CrisisAction.RESOURCES
        return CrisisAction.NONE


@dataclass(frozen=True)
class CrisisDecision:
    """
    Structured crisis gate output for the presentation layer.

    Attributes:
        severity: Heuristic risk score in [0, 10]
        keywords: Distinct vocabulary terms that matched
        action: Required presentation action
    """

    severity: int
    keywords: tuple[str, ...] = field(default_factory=tuple)
    action: CrisisAction = CrisisAction.NONE

    @property
    def should_halt(self) -> bool:
        return self.action == CrisisAction.HALT

    @property
    def show_interstitial(self) -> bool:
        return self.action in (CrisisAction.INTERSTITIAL, CrisisAction.HALT)

    @property
    def needs_resources(self) -> bool:
        return self.action != CrisisAction.NONE

    def to_dict(self) -> dict:
        return {
            "severity": self.severity,
            "keywords": list(self.keywords),
            "action": self.action.value,
            "should_halt": self.should_halt,
            "needs_resources": self.needs_resources,
            "show_interstitial": self.show_interstitial,
        }


def score_transcript(text: str, multiplier: int = 2) -> tuple[int, list[str]]:
    """
    Score text against the risk vocabulary.

    Args:
        text: Transcript to scan
        multiplier: Severity added per distinct match

    Returns:
        Tuple of (severity in [0, 10], matched terms)
    """
    lowered = text.lower()
    matches = [term for term in RISK_VOCABULARY if term in lowered]
    return min(10, len(matches) * multiplier), matches


class CrisisGate:
    """
    Crisis-safety gate in front of response generation.

    Usage:
        gate = CrisisGate(policy, flag_store, registry)
        decision = gate.assess(transcript, user_id)
        if decision.should_halt:
            raise SafetyHalt(decision)
    """

    def __init__(
        self,
        policy: Optional[CrisisPolicy] = None,
        flag_store: Optional[CrisisFlagStore] = None,
        registry: Optional[BackgroundTaskRegistry] = None,
    ) -> None:
        self._policy = policy or CrisisPolicy()
        self._flag_store = flag_store
        self._registry = registry

    @property
    def policy(self) -> CrisisPolicy:
        return self._policy

    def evaluate(self, text: str) -> CrisisDecision:
        """Pure scoring and decision; no side effects."""
        severity, keywords = score_transcript(text, self._policy.severity_multiplier)
        return CrisisDecision(
            severity=severity,
            keywords=tuple(keywords),
            action=self._policy.action_for(severity),
        )

    def assess(self, text: str, user_id: UUID) -> CrisisDecision:
        """
        Evaluate a transcript and schedule a crisis flag if warranted.

        Returns immediately; the flag write never blocks the caller.
        """
        decision = self.evaluate(text)
        CRISIS_DECISIONS_TOTAL.labels(action=decision.action.value).inc()

        if decision.action != CrisisAction.NONE:
            logger.warning(
                "Crisis indicators detected",
                severity=decision.severity,
                action=decision.action.value,
                keyword_count=len(decision.keywords),
            )

        if decision.severity >= self._policy.flag_threshold:
            self._schedule_flag(
                CrisisFlag.from_transcript(user_id, text, decision.severity, list(decision.keywords))
            )

        return decision

    def _schedule_flag(self, flag: CrisisFlag) -> None:
        if self._flag_store is None or self._registry is None:
            logger.warning("Crisis flag store not configured, flag not recorded", severity=flag.severity_score)
            return
        self._registry.spawn(self._record_flag(flag), name=f"crisis-flag-{flag.id}")

    async def _record_flag(self, flag: CrisisFlag) -> None:
        try:
            await self._flag_store.add(flag)
            CRISIS_FLAGS_TOTAL.labels(status="recorded").inc()
        except Exception as e:
            # Monitoring only; the check-in has already moved on
            CRISIS_FLAGS_TOTAL.labels(status="failed").inc()
            logger.error(
                "Failed to record crisis flag",
                user_id=str(flag.user_id),
                severity=flag.severity_score,
                error=str(e),
            )
