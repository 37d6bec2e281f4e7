from typing import List, Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session
from campus_events.crud.base import CRUDBase
from campus_events.models.organization import Organization
from campus_events.schemas.organization import OrganizationCreate, OrganizationUpdate
import logging


logger = logging.getLogger(__name__)


class CRUDOrganization(CRUDBase[Organization, OrganizationCreate, OrganizationUpdate]):
    def get_by_name(self, db: Session, *, name: str) -> Optional[Organization]:
        return db.query(Organization).filter(Organization.name == name).first()

    def search(self, db: Session, *, search: Optional[str] = None) -> List[Organization]:
        query = db.query(Organization)
        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(Organization.name.ilike(pattern), Organization.description.ilike(pattern))
            )
        return query.order_by(Organization.name).all()

    def create_by_admin(self, db: Session, *, obj_in: OrganizationCreate, created_by_id: int) -> Organization:
        data = obj_in.dict()
        data["created_by_id"] = created_by_id
        db_obj = Organization(**data)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        logger.info(f"Organization created: {db_obj.name} (id={db_obj.id})")
        return db_obj

    def toggle_status(self, db: Session, *, organization: Organization) -> Organization:
        updated = self.update(db, db_obj=organization, obj_in={"is_active": not organization.is_active})
        logger.info(f"Organization {updated.id} is_active -> {updated.is_active}")
        return updated


organization = CRUDOrganization(Organization)
