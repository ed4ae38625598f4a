from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class PostCreate(BaseModel):
    item_name: Optional[str] = None
    location: Optional[str] = None
    phone: Optional[str] = None
    price: Optional[str] = None
    description: Optional[str] = None


class PostRead(BaseModel):
    id: int
    item_name: str
    image: Optional[str] = None
    location: str = ""
    phone: str = ""
    price: str = ""
    description: str = ""
    owner_user_id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class OkResponse(BaseModel):
    ok: bool = True
