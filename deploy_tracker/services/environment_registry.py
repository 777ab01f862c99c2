"""Append-only registry of deployment environments."""

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from deploy_tracker.core.exceptions import DuplicateEnvironment, UnknownEnvironment
from deploy_tracker.models.environment import Environment
from deploy_tracker.utils.credentials import seal_credential, open_credential

logger = logging.getLogger(__name__)


class EnvironmentRegistry:
    def __init__(self, db: Session):
        self.db = db

    def register(
        self,
        name: str,
        geo_region: str,
        availability: str,
        endpoint: str,
        credential: str
    ) -> Environment:
        """
        Record a new environment. The cluster credential is stored encrypted.

        Raises:
            DuplicateEnvironment: name is already taken
        """
        if self.lookup(name) is not None:
            raise DuplicateEnvironment(name)

        environment = Environment(
            name=name,
            geo_region=geo_region,
            availability=availability,
            kubernetes_master=endpoint,
            kubernetes_token=seal_credential(credential, name),
        )
        self.db.add(environment)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise DuplicateEnvironment(name)
        self.db.refresh(environment)
        logger.info(
            "Registered environment %s (id=%s, region=%s)",
            environment.name, environment.id, environment.geo_region
        )
        return environment

    def lookup(self, name: str) -> Optional[Environment]:
        return self.db.query(Environment).filter(Environment.name == name).first()

    def get(self, environment_id: int) -> Environment:
        environment = self.db.get(Environment, environment_id)
        if environment is None:
            raise UnknownEnvironment(environment_id)
        return environment

    def list(self) -> List[Environment]:
        return self.db.query(Environment).order_by(Environment.id).all()

    @staticmethod
    def cluster_credential(environment: Environment) -> str:
        """Decrypted cluster credential. Never log the return value."""
        return open_credential(environment.kubernetes_token, environment.name)
