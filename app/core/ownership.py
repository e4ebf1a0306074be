"""Resource ownership checks for mutation endpoints"""
from enum import Enum
from typing import Optional
import logging

from sqlalchemy.orm import Session

from app.core.exceptions import InvalidResourceType, NotFound, NotOwner, Unauthenticated
from app.core.identity import Identity
from app.models.post import Post, Comment

logger = logging.getLogger(__name__)


class ResourceKind(str, Enum):
    """Ownable resource classes, each resolving its own owner column"""
    post = "post"
    comment = "comment"

    @property
    def model(self):
        return _OWNED_MODELS[self]

    @property
    def label(self) -> str:
        return "Blog post" if self is ResourceKind.post else "Comment"

    def owner_id(self, db: Session, resource_id: int) -> Optional[int]:
        """Owner user id for the resource, or None if it does not exist"""
        model = self.model
        row = db.query(model.user_id).filter(model.id == resource_id).first()
        return row[0] if row is not None else None

    @classmethod
    def parse(cls, value) -> "ResourceKind":
        try:
            return cls(value)
        except ValueError:
            raise InvalidResourceType(f"Invalid resource type: {value}")


_OWNED_MODELS = {
    ResourceKind.post: Post,
    ResourceKind.comment: Comment,
}


class OwnershipGuard:
    """Decides whether the current identity owns a resource"""

    def __init__(self, db: Session):
        self.db = db

    def authorize(self, kind, resource_id: int, identity: Optional[Identity]) -> None:
        """
        Allow the call to proceed only for the resource owner

        Raises:
            Unauthenticated if there is no identity (checked before any lookup)
            InvalidResourceType if ``kind`` is not a known resource class
            NotFound if the resource does not exist
            NotOwner if it belongs to someone else
        """
        if identity is None:
            raise Unauthenticated()

        kind = kind if isinstance(kind, ResourceKind) else ResourceKind.parse(kind)

        owner_id = kind.owner_id(self.db, resource_id)
        if owner_id is None:
            raise NotFound(f"{kind.label} not found")

        if owner_id != identity.id:
            logger.info(f"User {identity.id} denied on {kind.value} {resource_id} owned by {owner_id}")
            raise NotOwner()
