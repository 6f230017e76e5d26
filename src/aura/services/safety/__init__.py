"""
Safety services package.

SAFETY-CRITICAL: The crisis gate sits in front of every
response generation call.
"""

from aura.services.safety.crisis_gate import (
    RISK_VOCABULARY,
    CrisisAction,
    CrisisDecision,
    CrisisGate,
    CrisisPolicy,
    score_transcript,
)
from aura.services.safety.crisis_resources import (
    DEFAULT_RESOURCES,
    CrisisResource,
    CrisisResourceDirectory,
    ResourceType,
)

__all__ = [
    "RISK_VOCABULARY",
    "CrisisAction",
    "CrisisDecision",
    "CrisisGate",
    "CrisisPolicy",
    "score_transcript",
    "DEFAULT_RESOURCES",
    "CrisisResource",
    "CrisisResourceDirectory",
    "ResourceType",
]
