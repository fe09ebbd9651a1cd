"""Organization router: registration and team management."""

from typing import Annotated
from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from shieldmate.database.database import get_session
from shieldmate.core.dependencies import get_current_user
from shieldmate.models.organization import (
    MemberAdd,
    MemberPublic,
    OrganizationCreate,
    OrganizationPublic,
)
from shieldmate.models.user import User
from shieldmate.services import organization as organization_service
from shieldmate.utils.validation import ensure_id

router = APIRouter(prefix="/organizations", tags=["organizations"])


@router.post("/", response_model=OrganizationPublic, status_code=status.HTTP_201_CREATED)
def create_organization(
    org_in: OrganizationCreate,
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """
    Register an organization owned by the caller.

    The organization stays `pending_verification` until a super admin
    approves it; only approved organizations can post missions.

    Raises:
        403 InsufficientPermissionsError: If the caller is not an organization owner account.
    """
    return organization_service.create_organization(
        session, org_in, ensure_id(current_user.id_user, "User")
    )


@router.post(
    "/{org_id}/members",
    response_model=MemberPublic,
    status_code=status.HTTP_201_CREATED,
)
def add_member(
    org_id: int,
    member_in: MemberAdd,
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """
    Add a team member to the organization.

    Raises:
        403 InsufficientPermissionsError: If the caller is not an owner of the organization.
        404 NotFoundError: If the organization or user doesn't exist.
        409 AlreadyExistsError: If the user is already a member.
    """
    return organization_service.add_member(
        session,
        org_id,
        member_in.id_user,
        requested_by=ensure_id(current_user.id_user, "User"),
        role=member_in.role,
    )
