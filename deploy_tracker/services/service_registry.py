"""Append-only registry of services."""

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from deploy_tracker.core.exceptions import DuplicateService, UnknownService
from deploy_tracker.models.service import Service

logger = logging.getLogger(__name__)


class ServiceRegistry:
    def __init__(self, db: Session):
        self.db = db

    def register(self, name: str) -> Service:
        if self.lookup(name) is not None:
            raise DuplicateService(name)

        service = Service(name=name)
        self.db.add(service)
        try:
            self.db.commit()
        except IntegrityError:
            # Lost a race against a concurrent register of the same name
            self.db.rollback()
            raise DuplicateService(name)
        self.db.refresh(service)
        logger.info("Registered service %s (id=%s)", service.name, service.id)
        return service

    def lookup(self, name: str) -> Optional[Service]:
        return self.db.query(Service).filter(Service.name == name).first()

    def get(self, service_id: int) -> Service:
        service = self.db.get(Service, service_id)
        if service is None:
            raise UnknownService(service_id)
        return service

    def list(self) -> List[Service]:
        return self.db.query(Service).order_by(Service.id).all()
