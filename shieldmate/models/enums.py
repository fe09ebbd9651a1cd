from enum import Enum


class UserRole(str, Enum):
    VOLUNTEER = "volunteer"
    ORGANIZATION_OWNER = "organization_owner"
    TEAM_MEMBER = "team_member"
    SUPER_ADMIN = "super_admin"


class MemberRole(str, Enum):
    OWNER = "owner"
    TEAM_MEMBER = "team_member"


class OrganizationStatus(str, Enum):
    PENDING_VERIFICATION = "pending_verification"
    APPROVED = "approved"
    REJECTED = "rejected"


class DifficultyLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"


class MissionStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    PENDING_CLOSURE = "pending_closure"
    COMPLETED = "completed"


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class ApplicationDecision(str, Enum):
    ACCEPT = "accept"
    REJECT = "reject"


class ClosureParty(str, Enum):
    """The two sides of a mission that negotiate its closure."""

    VOLUNTEER = "volunteer"
    ORGANIZATION = "organization"

    @property
    def counterpart(self) -> "ClosureParty":
        if self is ClosureParty.VOLUNTEER:
            return ClosureParty.ORGANIZATION
        return ClosureParty.VOLUNTEER
