"""Organization service: creation, membership and verification status."""

from sqlmodel import Session, select
from sqlalchemy.exc import IntegrityError

from shieldmate.models.organization import (
    Organization,
    OrganizationCreate,
    OrganizationMember,
)
from shieldmate.models.enums import MemberRole, OrganizationStatus, UserRole
from shieldmate.models.user import User
from shieldmate.exceptions import (
    AlreadyExistsError,
    InsufficientPermissionsError,
    NotFoundError,
)
from shieldmate.utils.logger import logger


def create_organization(
    session: Session, org_in: OrganizationCreate, owner_id: int
) -> Organization:
    """
    Create an organization owned by `owner_id`.

    The organization starts in `pending_verification`; it cannot post missions
    until a super admin approves it.

    Raises:
        NotFoundError: If the owner does not exist.
        InsufficientPermissionsError: If the owner is not an organization_owner account.
    """
    owner = session.get(User, owner_id)
    if not owner:
        raise NotFoundError("User", owner_id)
    if owner.role != UserRole.ORGANIZATION_OWNER:
        raise InsufficientPermissionsError("create an organization")

    organization = Organization.model_validate(org_in)
    organization.members = [OrganizationMember(id_user=owner_id, role=MemberRole.OWNER)]
    session.add(organization)
    session.commit()
    session.refresh(organization)
    logger.info(f"Organization {organization.id_org} created by user {owner_id}")
    return organization


def get_organization(session: Session, org_id: int) -> Organization | None:
    return session.get(Organization, org_id)


def get_membership(
    session: Session, org_id: int, user_id: int
) -> OrganizationMember | None:
    """Return the membership row linking the user to the organization, if any."""
    return session.exec(
        select(OrganizationMember).where(
            OrganizationMember.id_org == org_id,
            OrganizationMember.id_user == user_id,
        )
    ).first()


def get_user_organization(session: Session, user_id: int) -> Organization | None:
    """
    Return the organization the user belongs to.

    A user is a member of at most one organization in practice; the earliest
    membership wins if there are several.
    """
    return session.exec(
        select(Organization)
        .join(OrganizationMember, OrganizationMember.id_org == Organization.id_org)  # type: ignore
        .where(OrganizationMember.id_user == user_id)
        .order_by(OrganizationMember.id_member)  # type: ignore
    ).first()


def add_member(
    session: Session,
    org_id: int,
    user_id: int,
    requested_by: int,
    role: MemberRole = MemberRole.TEAM_MEMBER,
) -> OrganizationMember:
    """
    Add a team member to an organization.

    Raises:
        NotFoundError: If the organization or the user does not exist.
        InsufficientPermissionsError: If `requested_by` is not an owner of the organization.
        AlreadyExistsError: If the user is already a member.
    """
    if not session.get(Organization, org_id):
        raise NotFoundError("Organization", org_id)
    if not session.get(User, user_id):
        raise NotFoundError("User", user_id)

    requester = get_membership(session, org_id, requested_by)
    if requester is None or requester.role != MemberRole.OWNER:
        raise InsufficientPermissionsError("manage this organization's team")

    member = OrganizationMember(id_org=org_id, id_user=user_id, role=role)
    session.add(member)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise AlreadyExistsError("Organization member", "user", user_id)
    session.refresh(member)
    return member


def set_organization_status(
    session: Session, org_id: int, new_status: OrganizationStatus
) -> Organization:
    """
    Record the verification outcome of an organization (super admin action).

    Raises:
        NotFoundError: If the organization does not exist.
    """
    organization = session.get(Organization, org_id)
    if not organization:
        raise NotFoundError("Organization", org_id)

    organization.status = new_status
    session.add(organization)
    session.commit()
    session.refresh(organization)
    logger.info(f"Organization {org_id} verification status set to {new_status.value}")
    return organization
