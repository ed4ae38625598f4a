from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, Request, UploadFile
from sqlalchemy.orm import Session

from agrichannel.core.database import get_db
from agrichannel.core.errors import NotFoundError
from agrichannel.models.account import Account
from agrichannel.models.post import Post
from agrichannel.routers.deps import get_current_account
from agrichannel.schemas.post import OkResponse, PostCreate, PostRead
from agrichannel.services.image_intake import ImageIntake
from agrichannel.services.listing_service import ListingService

router = APIRouter(prefix="/api/posts", tags=["posts"])


def _attach_image_url(post: Post, request: Request) -> PostRead:
    """
    Convert a stored Post to PostRead with an absolute image URL built from
    the request's own scheme and host. A missing file reads as no image.
    """
    data = PostRead.model_validate(post)

    images: ImageIntake = request.app.state.images
    if images.exists(post.image):
        media_url = request.app.state.settings.media_url.rstrip("/")
        base = str(request.base_url).rstrip("/")
        data.image = f"{base}{media_url}/{post.image}"
    else:
        data.image = None

    return data


@router.get("", response_model=List[PostRead])
def list_posts(request: Request, db: Session = Depends(get_db)):
    posts = ListingService(db).list()
    return [_attach_image_url(p, request) for p in posts]


@router.post("", response_model=PostRead)
def create_post(
    request: Request,
    background_tasks: BackgroundTasks,
    item_name: Optional[str] = Form(None, alias="itemName"),
    location: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    current_account: Account = Depends(get_current_account),
):
    fields = PostCreate(
        item_name=item_name,
        location=location,
        phone=phone,
        price=price,
        description=description,
    )
    service = ListingService(db, request.app.state.images)
    service.validate(fields)

    image_filename = None
    if image is not None and image.filename:
        image_filename = request.app.state.images.accept_upload(image)

    post = service.create(current_account.id, fields, image_filename)
    data = _attach_image_url(post, request)

    broadcaster = request.app.state.broadcaster
    background_tasks.add_task(
        broadcaster.broadcast_created,
        data.model_dump(mode="json", by_alias=True),
    )
    return data


def _parse_post_id(raw: str) -> int:
    """Ids that are not integers cannot name a post."""
    try:
        return int(raw)
    except ValueError:
        raise NotFoundError("Post not found") from None


@router.delete("/{post_id}", response_model=OkResponse)
def delete_post(
    post_id: str,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_account: Account = Depends(get_current_account),
):
    listing_id = _parse_post_id(post_id)
    ListingService(db, request.app.state.images).delete(listing_id, current_account.id)

    background_tasks.add_task(request.app.state.broadcaster.broadcast_deleted, listing_id)
    return OkResponse()
