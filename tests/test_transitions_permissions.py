from datetime import datetime, timezone

import pytest

from campus_events.core.exceptions import Conflict, Forbidden, InvalidState
from campus_events.core.permissions import Operation, can_perform, require
from campus_events.models import OrganizerStatus, Ticket, TicketStatus, UserRole
from campus_events.services.tickets import TRANSITIONS, attempt_transition, issue_ticket


def _ticket(status, **kwargs):
    return Ticket(ticket_id="t-1", status=status, **kwargs)


class TestTransitionTable:
    @pytest.mark.parametrize("target", [TicketStatus.USED, TicketStatus.CANCELLED, TicketStatus.EXPIRED])
    def test_active_moves_forward(self, target):
        assert attempt_transition(_ticket(TicketStatus.ACTIVE), target) == target

    def test_issue_starts_from_nothing(self):
        assert attempt_transition(None, TicketStatus.ACTIVE) == TicketStatus.ACTIVE

    @pytest.mark.parametrize("current", [TicketStatus.USED, TicketStatus.CANCELLED, TicketStatus.EXPIRED])
    def test_terminal_statuses_never_move(self, current):
        for target in TicketStatus:
            with pytest.raises(Conflict) as exc_info:
                attempt_transition(_ticket(current), target)
            assert exc_info.value.details["status"] == current.value

    def test_conflict_carries_used_at(self):
        used_at = datetime(2026, 1, 1, tzinfo=timezone.utc)
        with pytest.raises(Conflict) as exc_info:
            attempt_transition(_ticket(TicketStatus.USED, used_at=used_at), TicketStatus.USED, "Ticket cannot be used")
        assert exc_info.value.message == "Ticket cannot be used"
        assert exc_info.value.details["used_at"] == used_at

    def test_issue_onto_existing_ticket_is_invalid(self):
        with pytest.raises(InvalidState):
            attempt_transition(_ticket(TicketStatus.ACTIVE), TicketStatus.ACTIVE)

    def test_issue_to_non_active_is_invalid(self):
        with pytest.raises(InvalidState):
            attempt_transition(None, TicketStatus.USED)

    def test_table_only_leaves_active(self):
        assert set(TRANSITIONS) == {None, TicketStatus.ACTIVE}


class TestCapabilities:
    def test_only_students_claim(self, student, organizer, admin):
        assert can_perform(student, Operation.CLAIM_TICKET)
        assert not can_perform(organizer, Operation.CLAIM_TICKET)
        assert not can_perform(admin, Operation.CLAIM_TICKET)

    def test_nobody_without_account(self):
        assert not can_perform(None, Operation.CLAIM_TICKET)

    def test_inactive_user_denied(self, make_user):
        user = make_user(UserRole.STUDENT, is_active=False)
        assert not can_perform(user, Operation.CLAIM_TICKET)

    def test_return_requires_owner(self, student, other_student):
        ticket = Ticket(ticket_id="t-2", user_id=student.id, status=TicketStatus.ACTIVE)
        assert can_perform(student, Operation.RETURN_TICKET, ticket)
        assert not can_perform(other_student, Operation.RETURN_TICKET, ticket)

    def test_redeem_scoped_to_organization(self, db, organizer, student, make_user, make_organization, event):
        outsider = make_user(UserRole.ORGANIZER, organization_id=make_organization().id)
        ticket, _ = issue_ticket(db, user=student, event_id=event.id)
        assert can_perform(organizer, Operation.REDEEM_TICKET, ticket)
        assert not can_perform(outsider, Operation.REDEEM_TICKET, ticket)

    def test_admin_validates_anything_but_cannot_redeem(self, db, admin, student, event):
        ticket, _ = issue_ticket(db, user=student, event_id=event.id)
        assert can_perform(admin, Operation.VALIDATE_TICKET, ticket)
        assert not can_perform(admin, Operation.REDEEM_TICKET, ticket)

    def test_pending_organizer_is_told_why(self, make_user, organization):
        pending = make_user(
            UserRole.ORGANIZER,
            organization_id=organization.id,
            organizer_status=OrganizerStatus.PENDING,
            is_approved=False,
        )
        assert not can_perform(pending, Operation.CREATE_EVENT)
        with pytest.raises(Forbidden) as exc_info:
            require(pending, Operation.CREATE_EVENT)
        assert exc_info.value.message == "Organizer account not approved"

    def test_manage_event_needs_creator_or_admin(self, organizer, make_user, organization, admin, event):
        colleague = make_user(UserRole.ORGANIZER, organization_id=organization.id)
        assert can_perform(organizer, Operation.MANAGE_EVENT, event)
        assert can_perform(admin, Operation.MANAGE_EVENT, event)
        assert not can_perform(colleague, Operation.MANAGE_EVENT, event)

    def test_view_ticket(self, db, student, other_student, organizer, admin, event):
        ticket, _ = issue_ticket(db, user=student, event_id=event.id)
        assert can_perform(student, Operation.VIEW_TICKET, ticket)
        assert can_perform(organizer, Operation.VIEW_TICKET, ticket)
        assert can_perform(admin, Operation.VIEW_TICKET, ticket)
        assert not can_perform(other_student, Operation.VIEW_TICKET, ticket)

    def test_require_uses_custom_message(self, student):
        with pytest.raises(Forbidden) as exc_info:
            require(student, Operation.MODERATE, message="Admin access required")
        assert exc_info.value.message == "Admin access required"
