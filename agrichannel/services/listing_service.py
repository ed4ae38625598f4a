import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from agrichannel.core.database import commit
from agrichannel.core.errors import ForbiddenError, NotFoundError, ValidationError
from agrichannel.models.post import Post
from agrichannel.schemas.post import PostCreate
from agrichannel.services.image_intake import ImageIntake

logger = logging.getLogger(__name__)

OPTIONAL_FIELDS = ("location", "phone", "price", "description")

SQLITE_MIN_ID = -(2**63)
SQLITE_MAX_ID = 2**63 - 1


class ListingService:
    def __init__(self, db: Session, images: Optional[ImageIntake] = None):
        self.db = db
        self.images = images

    def list(self) -> List[Post]:
        return (
            self.db.query(Post)
            .order_by(Post.created_at.desc(), Post.id.desc())
            .all()
        )

    def get(self, listing_id: int) -> Post:
        # SQLite rowids are signed 64-bit; anything wider names no row
        if not SQLITE_MIN_ID <= listing_id <= SQLITE_MAX_ID:
            raise NotFoundError("Post not found")
        post = self.db.get(Post, listing_id)
        if post is None:
            raise NotFoundError("Post not found")
        return post

    def validate(self, fields: PostCreate) -> str:
        """Return the trimmed item name, or raise if it is blank."""
        item_name = (fields.item_name or "").strip()
        if not item_name:
            raise ValidationError("Item name is required.")
        return item_name

    def create(
        self,
        owner_account_id: int,
        fields: PostCreate,
        image_filename: Optional[str] = None,
    ) -> Post:
        item_name = self.validate(fields)

        data = {name: getattr(fields, name) or "" for name in OPTIONAL_FIELDS}
        post = Post(
            item_name=item_name,
            image=image_filename or None,
            owner_user_id=owner_account_id,
            **data,
        )
        self.db.add(post)
        commit(self.db)
        self.db.refresh(post)

        logger.info("Account %d created post %d", owner_account_id, post.id)
        return post

    def delete(self, listing_id: int, requesting_account_id: int) -> None:
        post = self.get(listing_id)
        if post.owner_user_id != requesting_account_id:
            raise ForbiddenError("Not allowed to delete this post")

        if post.image and self.images is not None:
            self.images.remove(post.image)

        self.db.delete(post)
        commit(self.db)
        logger.info("Account %d deleted post %d", requesting_account_id, listing_id)
