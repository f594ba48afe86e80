from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class ErrorEnvelope(BaseModel):
    code: str
    message: str
    details: Optional[dict[str, Any]] = None
    requestId: Optional[str] = None


class Health(BaseModel):
    status: str = "ok"


class Version(BaseModel):
    version: str


# === Key generation ===


class MidpointIn(BaseModel):
    low: str = Field(default="", max_length=255)
    high: str = Field(default="", max_length=255)


class MidpointOut(BaseModel):
    key: str


class KeysIn(MidpointIn):
    count: int = Field(default=1, ge=1, le=1000)


class KeysOut(BaseModel):
    keys: list[str]


# === Lists and items ===


class ListIn(BaseModel):
    name: str = Field(min_length=1, max_length=140)


class ListOut(BaseModel):
    id: str
    name: str
    createdAt: datetime
    updatedAt: datetime
    version: int


class ListsPage(BaseModel):
    lists: list[ListOut]


class ItemIn(BaseModel):
    label: str = Field(min_length=1, max_length=200)
    afterItemId: Optional[str] = None
    beforeItemId: Optional[str] = None


class ItemsIn(BaseModel):
    labels: list[str] = Field(min_length=1, max_length=1000)
    afterItemId: Optional[str] = None
    beforeItemId: Optional[str] = None


class ItemMove(BaseModel):
    afterItemId: Optional[str] = None
    beforeItemId: Optional[str] = None
    expectedVersion: Optional[int] = None


class ItemOut(BaseModel):
    id: str
    listId: str
    label: str
    sortKey: str
    createdAt: datetime
    updatedAt: datetime
    version: int


class ItemsOut(BaseModel):
    items: list[ItemOut]


class ListView(BaseModel):
    list: ListOut
    items: list[ItemOut]
