"""
Crisis Resource Directory

Per-user crisis resources shown alongside a crisis decision.
Users may register their own contacts (therapist, trusted person);
anyone without active resources gets the national defaults.

Consumed only by the presentation layer. Response generation
never reads from it.

LEGAL_REVIEW_REQUIRED: Default numbers must be verified for the
deployment jurisdiction.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Optional
from uuid import UUID, uuid4

from aura.config.logging_config import get_logger

logger = get_logger(__name__)


class ResourceType(StrEnum):
    HOTLINE = "hotline"
    LOCAL_THERAPIST = "local_therapist"
    EMERGENCY_CONTACT = "emergency_contact"
    CRISIS_CENTER = "crisis_center"
    ONLINE_CHAT = "online_chat"


@dataclass(frozen=True)
class CrisisResource:
    """
    A single crisis resource.

    Attributes:
        name: Display name
        resource_type: Kind of resource
        description: One-line description
        phone: Phone number or text instruction
        website: Resource URL
        availability: Hours of availability
        priority: Higher sorts first
        is_active: Inactive resources are never returned
    """

    name: str
    resource_type: ResourceType
    description: str
    phone: Optional[str] = None
    website: Optional[str] = None
    availability: str = "24/7"
    priority: int = 1
    is_active: bool = True
    id: UUID = field(default_factory=uuid4)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "name": self.name,
            "type": self.resource_type.value,
            "description": self.description,
            "phone": self.phone,
            "website": self.website,
            "availability": self.availability,
            "priority": self.priority,
        }


DEFAULT_RESOURCES: tuple[CrisisResource, ...] = (
    CrisisResource(
        name="988 Suicide & Crisis Lifeline",
        resource_type=ResourceType.HOTLINE,
        description="24/7 crisis support and prevention",
        phone="988",
        website="https://suicidepreventionlifeline.org",
        priority=5,
    ),
    CrisisResource(
        name="Crisis Text Line",
        resource_type=ResourceType.ONLINE_CHAT,
        description="Text-based crisis counseling",
        phone="Text HOME to 741741",
        website="https://www.crisistextline.org",
        priority=4,
    ),
    CrisisResource(
        name="SAMHSA Helpline",
        resource_type=ResourceType.HOTLINE,
        description="Mental health and substance abuse support",
        phone="1-800-662-4357",
        website="https://www.samhsa.gov/find-help/national-helpline",
        priority=3,
    ),
)


class CrisisResourceDirectory:
    """
    Resolves the resource list for a user.

    Usage:
        directory = CrisisResourceDirectory()
        resources = directory.get(user_id)
    """

    def __init__(self) -> None:
        self._by_user: dict[UUID, list[CrisisResource]] = {}

    def add(self, user_id: UUID, resource: CrisisResource) -> CrisisResource:
        self._by_user.setdefault(user_id, []).append(resource)
        logger.info(
            "Crisis resource added",
            user_id=str(user_id),
            resource_type=resource.resource_type.value,
        )
        return resource

    def get(self, user_id: UUID, limit: Optional[int] = None) -> list[CrisisResource]:
        """
        Active resources for a user, highest priority first.

        Falls back to the national defaults when the user has none.
        """
        own = [r for r in self._by_user.get(user_id, []) if r.is_active]
        resources = own or list(DEFAULT_RESOURCES)
        resources.sort(key=lambda r: r.priority, reverse=True)
        return resources[:limit] if limit is not None else resources
