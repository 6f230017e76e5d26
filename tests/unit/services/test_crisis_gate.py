"""
Unit Tests for Crisis Gate

SAFETY-CRITICAL: These tests pin the severity scoring, the decision
thresholds, and the fire-and-forget crisis flag write.
"""

import pytest

from aura.infrastructure.database.repositories.crisis_flag_store import (
    CrisisFlagStore,
    InMemoryCrisisFlagStore,
)
from aura.services.background import BackgroundTaskRegistry
from aura.services.safety.crisis_gate import (
    RISK_VOCABULARY,
    CrisisAction,
    CrisisGate,
    CrisisPolicy,
    score_transcript,
)


class BrokenFlagStore(CrisisFlagStore):
    async def add(self, flag) -> None:
        raise RuntimeError("flag table locked")

    async def list_for_user(self, user_id, limit=10):
        return []


class TestScoring:
    """Test suite for severity scoring."""

    def test_no_keywords_scores_zero(self) -> None:
        severity, keywords = score_transcript("I had a lovely walk in the park today")

        assert severity == 0
        assert keywords == []

    @pytest.mark.parametrize("term", RISK_VOCABULARY)
    def test_every_vocabulary_term_reaches_resources(self, term: str) -> None:
        """A single match must never score below the resources threshold."""
        gate = CrisisGate()

        decision = gate.evaluate(f"Lately I keep thinking {term.upper()} and it scares me")

        assert decision.severity >= 2
        assert decision.needs_resources

    def test_matching_is_case_insensitive(self) -> None:
        severity, keywords = score_transcript("I feel HOPELESS")

        assert severity == 2
        assert keywords == ["hopeless"]

    def test_repeated_term_counts_once(self) -> None:
        severity, _ = score_transcript("hopeless, hopeless, so hopeless")

        assert severity == 2

    def test_severity_is_capped_at_ten(self) -> None:
        text = " ".join(RISK_VOCABULARY)

        severity, keywords = score_transcript(text)

        assert severity == 10
        assert len(keywords) == len(RISK_VOCABULARY)


class TestDecisions:
    """Test suite for the decision policy."""

    @pytest.fixture
    def gate(self) -> CrisisGate:
        return CrisisGate()

    def test_no_indicators_no_action(self, gate: CrisisGate, user_id) -> None:
        decision = gate.assess("Work was busy but I handled it", user_id)

        assert decision.severity == 0
        assert decision.action == CrisisAction.NONE
        assert not decision.needs_resources
        assert not decision.should_halt

    def test_single_match_offers_resources(self, gate: CrisisGate) -> None:
        decision = gate.evaluate("I feel hopeless today")

        assert decision.severity == 2
        assert decision.action == CrisisAction.RESOURCES
        assert decision.needs_resources
        assert not decision.show_interstitial
        assert not decision.should_halt

    def test_three_matches_show_interstitial(self, gate: CrisisGate) -> None:
        decision = gate.evaluate("I feel hopeless and worthless, I started cutting again")

        assert decision.severity == 6
        assert decision.action == CrisisAction.INTERSTITIAL
        assert decision.show_interstitial
        assert not decision.should_halt

    def test_four_matches_halt(self, gate: CrisisGate) -> None:
        decision = gate.evaluate("hopeless, worthless, I want to die, I can't go on")

        assert decision.severity == 8
        assert decision.action == CrisisAction.HALT
        assert decision.should_halt
        assert decision.show_interstitial
        assert set(decision.keywords) == {"hopeless", "worthless", "want to die", "can't go on"}

    def test_decision_serializes_for_presentation(self, gate: CrisisGate) -> None:
        data = gate.evaluate("I feel hopeless today").to_dict()

        assert data["severity"] == 2
        assert data["action"] == "resources"
        assert data["keywords"] == ["hopeless"]
        assert data["should_halt"] is False


class TestCrisisFlags:
    """Test suite for crisis flag recording."""

    async def test_flag_recorded_at_threshold(self, user_id) -> None:
        store = InMemoryCrisisFlagStore()
        registry = BackgroundTaskRegistry()
        gate = CrisisGate(flag_store=store, registry=registry)

        gate.assess("hopeless and worthless", user_id)
        await registry.wait_idle()

        flags = await store.list_for_user(user_id)
        assert len(flags) == 1
        assert flags[0].severity_score == 4
        assert set(flags[0].keywords) == {"hopeless", "worthless"}
        assert flags[0].context_snippet == "hopeless and worthless"

    async def test_no_flag_below_threshold(self, user_id) -> None:
        store = InMemoryCrisisFlagStore()
        registry = BackgroundTaskRegistry()
        gate = CrisisGate(flag_store=store, registry=registry)

        decision = gate.assess("I feel hopeless today", user_id)
        await registry.wait_idle()

        assert decision.severity == 2
        assert await store.list_for_user(user_id) == []

    async def test_snippet_is_truncated(self, user_id) -> None:
        store = InMemoryCrisisFlagStore()
        registry = BackgroundTaskRegistry()
        gate = CrisisGate(flag_store=store, registry=registry)

        gate.assess("hopeless worthless " + "x" * 500, user_id)
        await registry.wait_idle()

        flags = await store.list_for_user(user_id)
        assert len(flags[0].context_snippet) == 200

    async def test_flag_failure_does_not_propagate(self, user_id) -> None:
        """A broken monitoring store must not affect the decision."""
        registry = BackgroundTaskRegistry()
        gate = CrisisGate(flag_store=BrokenFlagStore(), registry=registry)

        decision = gate.assess("hopeless, worthless, I want to die, I can't go on", user_id)
        await registry.wait_idle()

        assert decision.should_halt
        assert registry.active_count == 0

    def test_missing_store_is_tolerated(self, user_id) -> None:
        gate = CrisisGate()

        decision = gate.assess("hopeless and worthless", user_id)

        assert decision.severity == 4


class TestCrisisPolicy:
    """Test suite for policy validation."""

    def test_defaults(self) -> None:
        policy = CrisisPolicy()

        assert policy.action_for(1) == CrisisAction.NONE
        assert policy.action_for(2) == CrisisAction.RESOURCES
        assert policy.action_for(5) == CrisisAction.INTERSTITIAL
        assert policy.action_for(8) == CrisisAction.HALT

    def test_multiplier_below_two_rejected(self) -> None:
        with pytest.raises(ValueError):
            CrisisPolicy(severity_multiplier=1)

    def test_unordered_thresholds_rejected(self) -> None:
        with pytest.raises(ValueError):
            CrisisPolicy(interstitial_threshold=9, halt_threshold=8)

    def test_from_settings(self, test_settings) -> None:
        policy = CrisisPolicy.from_settings(test_settings.crisis)

        assert policy.halt_threshold == 8
        assert policy.flag_threshold == 3
