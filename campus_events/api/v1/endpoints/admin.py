from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from campus_events import crud, schemas
from campus_events.api import deps
from campus_events.api.v1.endpoints.events import with_ticket_counts
from campus_events.core.config import settings
from campus_events.core.exceptions import Conflict, NotFound, ValidationError
from campus_events.core.permissions import Operation, require
from campus_events.db.database import get_db
from campus_events.models.event import EventStatus
from campus_events.models.user import User, UserRole, OrganizerStatus
from campus_events.services import analytics as analytics_service
import logging

logger = logging.getLogger(__name__)
router = APIRouter()


def get_current_admin(
    current_user: User = Depends(deps.get_current_active_user)
) -> User:
    require(current_user, Operation.MODERATE, message="Admin access required")
    return current_user


@router.get("/dashboard", response_model=Dict[str, Any])
def read_admin_dashboard(
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
) -> Any:
    return analytics_service.admin_dashboard(db, admin=current_admin)

# ==========================================
# USERS
# ==========================================

@router.get("/users", response_model=schemas.UserListResponse)
def read_users(
    db: Session = Depends(get_db),
    role: Optional[UserRole] = None,
    organizer_status: Optional[OrganizerStatus] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=settings.MAX_PAGE_SIZE),
    current_admin: User = Depends(get_current_admin)
) -> Any:
    skip = (page - 1) * limit
    users, total = crud.user.search(
        db, role=role, organizer_status=organizer_status, search=search, skip=skip, limit=limit
    )
    return {"users": users, "pagination": schemas.build_pagination(page, limit, total, len(users))}


def _get_user_or_404(db: Session, user_id: int) -> User:
    user = crud.user.get(db, id=user_id)
    if not user:
        raise NotFound("User not found")
    return user


@router.put("/users/{user_id}/approve", response_model=schemas.User)
def approve_user(
    user_id: int,
    *,
    db: Session = Depends(get_db),
    approval_in: schemas.UserApprovalUpdate,
    current_admin: User = Depends(get_current_admin)
) -> Any:
    """Approve or reject an organizer account"""
    user = _get_user_or_404(db, user_id)
    user = crud.user.approve(
        db, user=user, is_approved=approval_in.is_approved, notes=approval_in.organizer_notes
    )
    logger.info(f"Admin {current_admin.id} set approval of user {user.id} to {user.is_approved}")
    return user


@router.put("/users/{user_id}/role", response_model=schemas.User)
def change_user_role(
    user_id: int,
    *,
    db: Session = Depends(get_db),
    role_in: schemas.UserRoleChange,
    current_admin: User = Depends(get_current_admin)
) -> Any:
    user = _get_user_or_404(db, user_id)

    update_data: Dict[str, Any] = {"role": role_in.role}
    if role_in.role == UserRole.ORGANIZER:
        organization_id = role_in.organization_id or user.organization_id
        if organization_id is None or not crud.organization.get(db, id=organization_id):
            raise ValidationError("Organizers must belong to an existing organization")
        organizer_status = role_in.organizer_status or OrganizerStatus.PENDING
        update_data.update(
            organization_id=organization_id,
            organizer_status=organizer_status,
            is_approved=organizer_status == OrganizerStatus.APPROVED,
        )
    else:
        update_data.update(organizer_status=None, is_approved=True)

    user = crud.user.update(db, db_obj=user, obj_in=update_data)
    logger.info(f"Admin {current_admin.id} changed role of user {user.id} to {user.role.value}")
    return user


@router.delete("/users/{user_id}", response_model=schemas.Message)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
) -> Any:
    if user_id == current_admin.id:
        raise ValidationError("You cannot delete your own account")
    user = _get_user_or_404(db, user_id)

    released = crud.ticket.release_seats_for_user(db, user_id=user.id)
    crud.user.remove(db, id=user.id)
    logger.info(f"Admin {current_admin.id} deleted user {user_id} ({released} seats released)")
    return {"message": "User deleted successfully"}

# ==========================================
# EVENTS
# ==========================================

@router.get("/events", response_model=schemas.EventListResponse)
def read_all_events(
    db: Session = Depends(get_db),
    event_status: Optional[EventStatus] = Query(None, alias="status"),
    is_approved: Optional[bool] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=settings.MAX_PAGE_SIZE),
    current_admin: User = Depends(get_current_admin)
) -> Any:
    skip = (page - 1) * limit
    events, total = crud.event.get_for_moderation(
        db, status=event_status, is_approved=is_approved, skip=skip, limit=limit
    )
    return {
        "events": with_ticket_counts(db, events),
        "pagination": schemas.build_pagination(page, limit, total, len(events)),
    }


def _get_event_or_404(db: Session, event_id: int):
    event = crud.event.get(db, id=event_id)
    if not event:
        raise NotFound("Event not found")
    return event


@router.put("/events/{event_id}/approve", response_model=schemas.Event)
def approve_event(
    event_id: int,
    *,
    db: Session = Depends(get_db),
    approval_in: schemas.EventApproval,
    current_admin: User = Depends(get_current_admin)
) -> Any:
    event = _get_event_or_404(db, event_id)
    event = crud.event.update(
        db,
        db_obj=event,
        obj_in={"is_approved": approval_in.is_approved, "approval_reason": approval_in.reason},
    )
    logger.info(f"Admin {current_admin.id} set approval of event {event.id} to {event.is_approved}")
    return event


@router.put("/events/{event_id}/status", response_model=schemas.Event)
def change_event_status(
    event_id: int,
    *,
    db: Session = Depends(get_db),
    status_in: schemas.EventStatusChange,
    current_admin: User = Depends(get_current_admin)
) -> Any:
    event = _get_event_or_404(db, event_id)
    event = crud.event.update(db, db_obj=event, obj_in={"status": status_in.status})
    logger.info(f"Admin {current_admin.id} moved event {event.id} to {event.status.value}")
    return event


@router.delete("/events/{event_id}", response_model=schemas.Message)
def delete_event(
    event_id: int,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
) -> Any:
    event = _get_event_or_404(db, event_id)
    crud.event.remove(db, id=event.id)
    logger.info(f"Admin {current_admin.id} deleted event {event_id}")
    return {"message": "Event deleted successfully"}

# ==========================================
# ORGANIZATIONS
# ==========================================

@router.get("/organizations", response_model=List[schemas.Organization])
def read_organizations(
    db: Session = Depends(get_db),
    search: Optional[str] = None,
    current_admin: User = Depends(get_current_admin)
) -> Any:
    return crud.organization.search(db, search=search)


def _get_organization_or_404(db: Session, organization_id: int):
    organization = crud.organization.get(db, id=organization_id)
    if not organization:
        raise NotFound("Organization not found")
    return organization


@router.post("/organizations", response_model=schemas.Organization, status_code=status.HTTP_201_CREATED)
def create_organization(
    *,
    db: Session = Depends(get_db),
    organization_in: schemas.OrganizationCreate,
    current_admin: User = Depends(get_current_admin)
) -> Any:
    if crud.organization.get_by_name(db, name=organization_in.name):
        raise Conflict("Organization with this name already exists")
    return crud.organization.create_by_admin(
        db, obj_in=organization_in, created_by_id=current_admin.id
    )


@router.put("/organizations/{organization_id}", response_model=schemas.Organization)
def update_organization(
    organization_id: int,
    *,
    db: Session = Depends(get_db),
    organization_in: schemas.OrganizationUpdate,
    current_admin: User = Depends(get_current_admin)
) -> Any:
    organization = _get_organization_or_404(db, organization_id)
    if organization_in.name and organization_in.name != organization.name:
        if crud.organization.get_by_name(db, name=organization_in.name):
            raise Conflict("Organization with this name already exists")
    return crud.organization.update(db, db_obj=organization, obj_in=organization_in)


@router.put("/organizations/{organization_id}/toggle-status", response_model=schemas.Organization)
def toggle_organization_status(
    organization_id: int,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
) -> Any:
    organization = _get_organization_or_404(db, organization_id)
    return crud.organization.toggle_status(db, organization=organization)


@router.delete("/organizations/{organization_id}", response_model=schemas.Message)
def delete_organization(
    organization_id: int,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
) -> Any:
    organization = _get_organization_or_404(db, organization_id)
    if organization.member_count or organization.event_count:
        raise Conflict(
            "Cannot delete an organization that still has members or events",
            {"member_count": organization.member_count, "event_count": organization.event_count},
        )
    crud.organization.remove(db, id=organization.id)
    logger.info(f"Admin {current_admin.id} deleted organization {organization_id}")
    return {"message": "Organization deleted successfully"}
