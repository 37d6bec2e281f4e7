from typing import List, Optional
from sqlalchemy.orm import Session
from pydantic import BaseModel
from campus_events.crud.base import CRUDBase
from campus_events.models.saved_event import SavedEvent


class CRUDSavedEvent(CRUDBase[SavedEvent, BaseModel, BaseModel]):

    def get_entry(self, db: Session, *, user_id: int, event_id: int) -> Optional[SavedEvent]:
        return (
            db.query(SavedEvent)
            .filter(SavedEvent.user_id == user_id, SavedEvent.event_id == event_id)
            .first()
        )

    def get_by_user(self, db: Session, *, user_id: int) -> List[SavedEvent]:
        return (
            db.query(SavedEvent)
            .filter(SavedEvent.user_id == user_id)
            .order_by(SavedEvent.saved_at.desc(), SavedEvent.id.desc())
            .all()
        )

    def save(self, db: Session, *, user_id: int, event_id: int) -> SavedEvent:
        db_obj = SavedEvent(user_id=user_id, event_id=event_id)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj


saved_event = CRUDSavedEvent(SavedEvent)
