"""
Capability checks.

Every guarded operation is listed once in ``_RULES``; endpoints and services
ask ``can_perform(actor, operation, resource)`` instead of re-checking roles
ad hoc. ``resource`` is the Ticket or Event the operation targets, or None
for a role-only gate evaluated before the resource is loaded.
"""
import enum
import logging
from typing import Any, Callable, Dict, Optional
from campus_events.core.exceptions import Forbidden
from campus_events.models.event import Event
from campus_events.models.ticket import Ticket
from campus_events.models.user import User, UserRole, OrganizerStatus

logger = logging.getLogger(__name__)


class Operation(str, enum.Enum):
    CLAIM_TICKET = "claim_ticket"
    LIST_MY_TICKETS = "list_my_tickets"
    RETURN_TICKET = "return_ticket"
    SAVE_EVENT = "save_event"
    VALIDATE_TICKET = "validate_ticket"
    REDEEM_TICKET = "redeem_ticket"
    VIEW_TICKET = "view_ticket"
    CREATE_EVENT = "create_event"
    MANAGE_EVENT = "manage_event"
    VIEW_ANALYTICS = "view_analytics"
    MODERATE = "moderate"


def _is_student(actor: User) -> bool:
    return actor.role == UserRole.STUDENT


def _is_admin(actor: User) -> bool:
    return actor.role == UserRole.ADMIN


def _is_approved_organizer(actor: User) -> bool:
    return actor.role == UserRole.ORGANIZER and actor.organizer_status == OrganizerStatus.APPROVED


def _event_of(resource: Any) -> Optional[Event]:
    if isinstance(resource, Ticket):
        return resource.event
    if isinstance(resource, Event):
        return resource
    return None


def _in_event_organization(actor: User, resource: Any) -> bool:
    if resource is None:
        return True
    event = _event_of(resource)
    return (
        event is not None
        and actor.organization_id is not None
        and event.organization_id == actor.organization_id
    )


def _owns_ticket(actor: User, resource: Any) -> bool:
    if resource is None:
        return True
    return isinstance(resource, Ticket) and resource.user_id == actor.id


def _created_event(actor: User, resource: Any) -> bool:
    if resource is None:
        return True
    event = _event_of(resource)
    return event is not None and event.created_by_id == actor.id


_RULES: Dict[Operation, Callable[[User, Any], bool]] = {
    Operation.CLAIM_TICKET: lambda a, r: _is_student(a),
    Operation.LIST_MY_TICKETS: lambda a, r: _is_student(a),
    Operation.SAVE_EVENT: lambda a, r: _is_student(a),
    Operation.RETURN_TICKET: lambda a, r: _is_student(a) and _owns_ticket(a, r),
    Operation.VALIDATE_TICKET: lambda a, r: _is_admin(a) or (
        _is_approved_organizer(a) and _in_event_organization(a, r)
    ),
    Operation.REDEEM_TICKET: lambda a, r: _is_approved_organizer(a) and _in_event_organization(a, r),
    Operation.VIEW_TICKET: lambda a, r: _is_admin(a) or (
        _is_student(a) and _owns_ticket(a, r)
    ) or (_is_approved_organizer(a) and _in_event_organization(a, r)),
    Operation.CREATE_EVENT: lambda a, r: _is_approved_organizer(a) and a.organization_id is not None,
    Operation.MANAGE_EVENT: lambda a, r: _is_admin(a) or (
        _is_approved_organizer(a) and _created_event(a, r)
    ),
    Operation.VIEW_ANALYTICS: lambda a, r: _is_admin(a) or _is_approved_organizer(a),
    Operation.MODERATE: lambda a, r: _is_admin(a),
}


def can_perform(actor: Optional[User], operation: Operation, resource: Any = None) -> bool:
    """Check if actor may perform operation on resource"""
    if actor is None or not actor.is_active:
        return False
    rule = _RULES.get(operation)
    if rule is None:
        return False
    return bool(rule(actor, resource))


def require(
    actor: Optional[User], operation: Operation, resource: Any = None, message: Optional[str] = None
) -> None:
    """Raise Forbidden unless actor may perform operation on resource"""
    if can_perform(actor, operation, resource):
        return

    logger.warning(
        f"Capability denied: user={getattr(actor, 'id', None)} "
        f"role={getattr(getattr(actor, 'role', None), 'value', None)} operation={operation.value}"
    )
    if (
        actor is not None
        and actor.role == UserRole.ORGANIZER
        and actor.organizer_status != OrganizerStatus.APPROVED
    ):
        raise Forbidden("Organizer account not approved")
    raise Forbidden(message or "Access denied. Insufficient permissions.")
