"""
Dashboards and analytics.

Date bucketing happens in Python over the fetched rows so the same code runs
on PostgreSQL and SQLite; plain status counts are grouped in SQL.
"""
import logging
from collections import Counter, OrderedDict
from datetime import timedelta
from typing import Any, Dict, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from campus_events import crud
from campus_events.core.exceptions import Forbidden, NotFound, ValidationError
from campus_events.core.permissions import Operation, require
from campus_events.models.base import as_utc, utcnow
from campus_events.models.organization import Organization
from campus_events.models.event import Event, EventCategory, EventStatus, TicketType
from campus_events.models.ticket import Ticket, TicketStatus, HELD_STATUSES
from campus_events.models.user import User, UserRole, OrganizerStatus

logger = logging.getLogger(__name__)

TIME_RANGES = {
    "1month": timedelta(days=30),
    "3months": timedelta(days=91),
    "6months": timedelta(days=182),
    "1year": timedelta(days=365),
    "all": None,
}


def _event_brief(event: Event, held: int = 0) -> Dict[str, Any]:
    return {
        "id": event.id,
        "title": event.title,
        "category": event.category.value,
        "date": as_utc(event.date),
        "status": event.status.value,
        "capacity": event.capacity,
        "registrations": held,
        "ticket_type": event.ticket_type.value,
        "ticket_price": event.ticket_price,
    }


def _held_counts(counts: Dict[int, Dict[str, int]], event_id: int) -> int:
    c = counts.get(event_id, {})
    return c.get(TicketStatus.ACTIVE.value, 0) + c.get(TicketStatus.USED.value, 0)


def organizer_dashboard(db: Session, *, organizer: User) -> Dict[str, Any]:
    """Overview of every event the organizer created."""
    require(organizer, Operation.VIEW_ANALYTICS)
    if organizer.role != UserRole.ORGANIZER:
        raise Forbidden("Only organizers have a dashboard")

    events = crud.event.get_by_creator(db, created_by_id=organizer.id)
    event_ids = [e.id for e in events]
    ticket_counts = crud.ticket.count_by_status(db, event_ids=event_ids)
    per_event = crud.event.ticket_counts(db, event_ids=event_ids)
    tickets = crud.ticket.get_by_events(db, event_ids=event_ids)

    published = [e for e in events if e.status == EventStatus.PUBLISHED and e.is_approved]
    now = utcnow()

    returned = [
        t for t in tickets if t.status == TicketStatus.CANCELLED and t.return_reason is not None
    ]
    reasons = Counter(t.return_reason.value for t in returned)

    recent = sorted(events, key=lambda e: (as_utc(e.created_at), e.id), reverse=True)[:5]
    upcoming = sorted(
        (e for e in published if as_utc(e.date) >= now), key=lambda e: as_utc(e.date)
    )[:5]

    monthly = Counter(as_utc(t.created_at).strftime("%Y-%m") for t in tickets)

    return {
        "stats": {
            "total_events": len(events),
            "published_events": len(published),
            "total_tickets": len(tickets),
            "pending_events": len(events) - len(published),
        },
        "ticket_counts": {
            "active": ticket_counts[TicketStatus.ACTIVE.value] + ticket_counts[TicketStatus.USED.value],
            "cancelled": ticket_counts[TicketStatus.CANCELLED.value],
        },
        "returned_tickets": [
            {
                "ticket_id": t.ticket_id,
                "event": {"id": t.event.id, "title": t.event.title},
                "user": {"id": t.user.id, "email": t.user.email, "name": t.user.full_name},
                "return_reason": t.return_reason.value,
                "return_comment": t.return_comment,
                "returned_at": t.returned_at,
            }
            for t in returned
        ],
        "cancelled_tickets_analytics": [
            {"reason": reason, "count": count} for reason, count in sorted(reasons.items())
        ],
        "event_status_breakdown": [
            {"status": status, "count": count}
            for status, count in sorted(Counter(e.status.value for e in events).items())
        ],
        "recent_events": [
            dict(
                _event_brief(e, _held_counts(per_event, e.id)),
                tickets_issued=_held_counts(per_event, e.id),
                remaining_capacity=e.capacity - _held_counts(per_event, e.id),
            )
            for e in recent
        ],
        "upcoming_events": [_event_brief(e, _held_counts(per_event, e.id)) for e in upcoming],
        # Last twelve months that saw any ticket, oldest first
        "monthly_tickets": [
            {"month": month, "ticket_count": monthly[month]} for month in sorted(monthly)[-12:]
        ],
    }


def event_analytics(db: Session, *, actor: User, event_id: int) -> Dict[str, Any]:
    """Ticket, revenue and timing breakdown for a single event."""
    event = crud.event.get(db, id=event_id)
    if not event:
        raise NotFound("Event not found")
    require(actor, Operation.MANAGE_EVENT, event, message="Access denied")

    tickets = crud.ticket.get_by_event(db, event_id=event.id)
    statuses = Counter(t.status.value for t in tickets)
    total = len(tickets)
    used = statuses.get(TicketStatus.USED.value, 0)

    paid = [t.price for t in tickets if t.price and t.price > 0]
    revenue = {
        "total_revenue": sum(paid),
        "average_price": sum(paid) / len(paid) if paid else 0,
        "max_price": max(paid) if paid else 0,
        "min_price": min(paid) if paid else 0,
    }

    by_day = Counter(as_utc(t.created_at).strftime("%Y-%m-%d") for t in tickets)
    by_hour = Counter(as_utc(t.created_at).hour for t in tickets)

    return {
        "event": {
            "id": event.id,
            "title": event.title,
            "date": as_utc(event.date),
            "capacity": event.capacity,
            "ticket_type": event.ticket_type.value,
            "ticket_price": event.ticket_price,
        },
        "ticket_stats": {
            "total_tickets": total,
            "used_tickets": used,
            "active_tickets": statuses.get(TicketStatus.ACTIVE.value, 0),
            "cancelled_tickets": statuses.get(TicketStatus.CANCELLED.value, 0),
            "attendance_rate": (used / total) * 100 if total else 0,
            "capacity_utilization": (total / event.capacity) * 100 if event.capacity else 0,
        },
        "revenue": revenue,
        "charts": {
            "tickets_by_day": [{"date": day, "count": by_day[day]} for day in sorted(by_day)],
            "tickets_by_hour": [{"hour": hour, "count": by_hour[hour]} for hour in sorted(by_hour)],
        },
    }


def events_analytics(
    db: Session, *, actor: User, time_range: str = "6months", category: Optional[str] = None
) -> Dict[str, Any]:
    """Aggregate analytics over events created in ``time_range``.

    Organizers only see their own organization's events.
    """
    require(actor, Operation.VIEW_ANALYTICS)
    if time_range not in TIME_RANGES:
        raise ValidationError(
            "Invalid time range", {"allowed": list(TIME_RANGES)}
        )

    now = utcnow()
    query = db.query(Event)
    window = TIME_RANGES[time_range]
    if window is not None:
        query = query.filter(Event.created_at >= now - window)
    if actor.role == UserRole.ORGANIZER:
        query = query.filter(Event.organization_id == actor.organization_id)
    if category and category != "all":
        try:
            query = query.filter(Event.category == EventCategory(category))
        except ValueError:
            raise ValidationError("Invalid category", {"allowed": [c.value for c in EventCategory]})

    events = query.all()
    event_ids = [e.id for e in events]
    held_tickets = (
        db.query(Ticket).filter(Ticket.event_id.in_(event_ids), Ticket.status.in_(HELD_STATUSES)).all()
        if event_ids
        else []
    )
    held_by_event = Counter(t.event_id for t in held_tickets)

    total_registrations = len(held_tickets)
    total_revenue = sum(
        e.ticket_price * held_by_event[e.id]
        for e in events
        if e.ticket_type == TicketType.PAID and e.ticket_price
    )
    average_attendance = (
        sum(held_by_event[e.id] / e.capacity for e in events if e.capacity) / len(events) * 100
        if events
        else 0
    )

    by_month: "OrderedDict[str, int]" = OrderedDict()
    for e in sorted(events, key=lambda e: as_utc(e.date)):
        key = as_utc(e.date).strftime("%b %Y")
        by_month[key] = by_month.get(key, 0) + 1

    # Thirty day trend with empty days filled in
    since = now - timedelta(days=30)
    daily = Counter(
        as_utc(t.created_at).strftime("%Y-%m-%d")
        for t in held_tickets
        if as_utc(t.created_at) >= since
    )
    trend = []
    for offset in range(29, -1, -1):
        day = (now - timedelta(days=offset)).strftime("%Y-%m-%d")
        trend.append({"date": day, "registrations": daily.get(day, 0)})

    briefs = [_event_brief(e, held_by_event[e.id]) for e in events]
    top_events = sorted(
        (b for b in briefs if b["capacity"] > 0),
        key=lambda b: b["registrations"] / b["capacity"],
        reverse=True,
    )[:5]
    upcoming = sorted((b for b in briefs if b["date"] > now), key=lambda b: b["date"])[:5]

    logger.debug(f"Analytics for user {actor.id}: {len(events)} events in range {time_range}")
    return {
        "total_events": len(events),
        "total_registrations": total_registrations,
        "total_revenue": total_revenue,
        "average_attendance": average_attendance,
        "events_by_category": dict(Counter(e.category.value for e in events)),
        "events_by_month": dict(by_month),
        "registration_trends": trend,
        "top_events": top_events,
        "upcoming_events": upcoming,
    }


def admin_dashboard(db: Session, *, admin: User) -> Dict[str, Any]:
    require(admin, Operation.MODERATE)

    pending_organizers = (
        db.query(func.count(User.id))
        .filter(User.role == UserRole.ORGANIZER, User.organizer_status == OrganizerStatus.PENDING)
        .scalar()
    )
    pending_events = (
        db.query(func.count(Event.id))
        .filter(Event.is_approved.is_(False), Event.status != EventStatus.CANCELLED)
        .scalar()
    )
    users_by_role = crud.user.count_by_role(db)
    events_by_status = crud.event.count_by_status(db)
    tickets_by_status = crud.ticket.count_by_status(db)

    return {
        "users": {
            "total": sum(users_by_role.values()),
            "by_role": users_by_role,
            "pending_organizers": pending_organizers or 0,
        },
        "events": {
            "total": sum(events_by_status.values()),
            "by_status": events_by_status,
            "pending_approval": pending_events or 0,
        },
        "tickets": {
            "total": sum(tickets_by_status.values()),
            "by_status": tickets_by_status,
        },
        "organizations": {
            "total": db.query(func.count(Organization.id)).scalar() or 0,
        },
    }

