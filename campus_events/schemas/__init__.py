from .common import Pagination, Message, build_pagination
from .organization import (
    Organization, OrganizationCreate, OrganizationUpdate, OrganizationSummary
)
from .user import (
    User, UserCreate, UserBase, UserSummary, UserProfileUpdate,
    UserApprovalUpdate, UserRoleChange, UserListResponse
)
from .auth import Token, TokenData, LoginRequest
from .event import (
    Event, EventCreate, EventUpdate, EventSummary, EventWithTickets, EventListResponse,
    EventApproval, EventStatusChange, Attendee, AttendeeUser, AttendeesResponse
)
from .ticket import (
    Ticket, TicketWithQR, TicketClaimRequest, TicketClaimResponse, TicketValidateRequest,
    TicketValidationResponse, TicketReturnRequest, TicketActionResponse,
    TicketStatusSummary, TicketScanSummary
)
