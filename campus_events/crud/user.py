from typing import Any, Dict, List, Optional, Tuple, Union
from sqlalchemy import or_
from sqlalchemy.orm import Session
from campus_events.crud.base import CRUDBase
from campus_events.models.user import User, UserRole, OrganizerStatus
from campus_events.schemas.user import UserCreate, UserProfileUpdate
from campus_events.core.security import get_password_hash, verify_password


class CRUDUser(CRUDBase[User, UserCreate, UserProfileUpdate]):

    def get_by_email(self, db: Session, *, email: str) -> Optional[User]:
        return db.query(User).filter(User.email == email.lower()).first()

    def create(self, db: Session, *, obj_in: UserCreate) -> User:
        is_organizer = obj_in.role == UserRole.ORGANIZER
        db_obj = User(
            email=obj_in.email.lower(),
            hashed_password=get_password_hash(obj_in.password),
            first_name=obj_in.first_name,
            last_name=obj_in.last_name,
            phone_number=obj_in.phone_number,
            role=obj_in.role,
            student_id=obj_in.student_id,
            organization_id=obj_in.organization_id if is_organizer else None,
            # Organizers wait for an admin; everyone else is usable straight away
            organizer_status=OrganizerStatus.PENDING if is_organizer else None,
            is_approved=not is_organizer,
        )
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def update(
        self, db: Session, *, db_obj: User, obj_in: Union[UserProfileUpdate, Dict[str, Any]]
    ) -> User:
        if isinstance(obj_in, dict):
            update_data = dict(obj_in)
        else:
            update_data = obj_in.dict(exclude_unset=True)
        if "password" in update_data:
            update_data["hashed_password"] = get_password_hash(update_data.pop("password"))
        return super().update(db, db_obj=db_obj, obj_in=update_data)

    def authenticate(self, db: Session, *, email: str, password: str) -> Optional[User]:
        user = self.get_by_email(db, email=email)
        if not user:
            return None
        if not verify_password(password, user.hashed_password):
            return None
        return user

    def is_active(self, user: User) -> bool:
        return user.is_active

    def search(
        self,
        db: Session,
        *,
        role: Optional[UserRole] = None,
        organizer_status: Optional[OrganizerStatus] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 20
    ) -> Tuple[List[User], int]:
        query = db.query(User)
        if role is not None:
            query = query.filter(User.role == role)
        if organizer_status is not None:
            query = query.filter(User.organizer_status == organizer_status)
        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(
                    User.email.ilike(pattern),
                    User.first_name.ilike(pattern),
                    User.last_name.ilike(pattern),
                )
            )
        total = query.count()
        users = query.order_by(User.created_at.desc(), User.id.desc()).offset(skip).limit(limit).all()
        return users, total

    def approve(self, db: Session, *, user: User, is_approved: bool, notes: Optional[str] = None) -> User:
        update_data: Dict[str, Any] = {"is_approved": is_approved}
        if user.role == UserRole.ORGANIZER:
            update_data["organizer_status"] = (
                OrganizerStatus.APPROVED if is_approved else OrganizerStatus.REJECTED
            )
        if notes is not None:
            update_data["organizer_notes"] = notes
        return super().update(db, db_obj=user, obj_in=update_data)

    def count_by_role(self, db: Session) -> Dict[str, int]:
        counts = {role.value: 0 for role in UserRole}
        for role in UserRole:
            counts[role.value] = db.query(User).filter(User.role == role).count()
        return counts


user = CRUDUser(User)
