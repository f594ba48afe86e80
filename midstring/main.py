import logging
from typing import Optional, Union

from fastapi import Depends, FastAPI, Header, HTTPException, Request, Response
from fastapi.responses import JSONResponse

from .config import Settings, settings
from .core import keys_between, midpoint
from .db import SqlStorage, make_engine
from .errors import MidpointError, NotFound, VersionConflict
from .models import Item, OrderedList
from .schemas import (
    ErrorEnvelope,
    Health,
    ItemIn,
    ItemMove,
    ItemOut,
    ItemsIn,
    ItemsOut,
    KeysIn,
    KeysOut,
    ListIn,
    ListOut,
    ListsPage,
    ListView,
    MidpointIn,
    MidpointOut,
    Version,
)
from .storage import Storage
from .utils import etag_for, new_uuid, version_from_etag

logger = logging.getLogger(__name__)

AnyStorage = Union[Storage, SqlStorage]


def build_storage(cfg: Settings) -> AnyStorage:
    if cfg.STORAGE == "sql":
        return SqlStorage(make_engine(cfg.DATABASE_URL))
    return Storage()


storage = build_storage(settings)


def get_storage() -> AnyStorage:
    return storage


app = FastAPI(title=settings.API_TITLE, version=settings.API_VERSION)


# === Error handlers ===


def error_response(status_code: int, code: str, message: str, details: Optional[dict] = None) -> JSONResponse:
    body = ErrorEnvelope(code=code, message=message, details=details, requestId=new_uuid())
    return JSONResponse(status_code=status_code, content=body.model_dump())


@app.exception_handler(MidpointError)
async def midpoint_error_handler(request: Request, exc: MidpointError):
    logger.warning("%s on %s %s: %s", exc.code, request.method, request.url.path, exc)
    return error_response(422, exc.code, str(exc), exc.details())


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    return error_response(404, exc.code, str(exc), {"kind": exc.kind, "id": exc.ident})


@app.exception_handler(VersionConflict)
async def version_conflict_handler(request: Request, exc: VersionConflict):
    details = {"kind": exc.kind, "id": exc.ident, "expected": exc.expected, "actual": exc.actual}
    return error_response(412, exc.code, str(exc), details)


# === Helpers ===


def list_out(lst: OrderedList) -> ListOut:
    return ListOut(
        id=lst.id,
        name=lst.name,
        createdAt=lst.created_at,
        updatedAt=lst.updated_at,
        version=lst.version,
    )


def item_out(item: Item) -> ItemOut:
    return ItemOut(
        id=item.id,
        listId=item.list_id,
        label=item.label,
        sortKey=item.sort_key,
        createdAt=item.created_at,
        updatedAt=item.updated_at,
        version=item.version,
    )


def expected_version(if_match: str) -> int:
    version = version_from_etag(if_match)
    if version is None:
        raise HTTPException(status_code=412, detail="precondition_failed")
    return version


# === Health & metadata ===


@app.get("/v1/health", response_model=Health)
def health():
    return Health()


@app.get("/v1/version", response_model=Version)
def version():
    return Version(version=settings.API_VERSION)


# === Key generation ===


@app.post("/v1/midpoint", response_model=MidpointOut)
def create_midpoint(payload: MidpointIn):
    return MidpointOut(key=midpoint(payload.low, payload.high))


@app.post("/v1/keys:between", response_model=KeysOut)
def create_keys(payload: KeysIn):
    return KeysOut(keys=keys_between(payload.low, payload.high, payload.count))


# === List endpoints ===


@app.post("/v1/lists", response_model=ListOut, status_code=201)
def create_list(payload: ListIn, store: AnyStorage = Depends(get_storage)):
    return list_out(store.create_list(payload.name))


@app.get("/v1/lists", response_model=ListsPage)
def list_lists(store: AnyStorage = Depends(get_storage)):
    return ListsPage(lists=[list_out(l) for l in store.list_lists()])


@app.get("/v1/lists/{list_id}", response_model=ListView)
def get_list(list_id: str, response: Response, store: AnyStorage = Depends(get_storage)):
    lst = store.get_list(list_id)
    response.headers["ETag"] = etag_for(lst.version)
    return ListView(list=list_out(lst), items=[item_out(i) for i in store.list_items(list_id)])


@app.patch("/v1/lists/{list_id}", response_model=ListOut)
def rename_list(
    list_id: str,
    payload: ListIn,
    store: AnyStorage = Depends(get_storage),
    if_match: str = Header(..., alias="If-Match"),
):
    return list_out(store.rename_list(list_id, payload.name, expected_version(if_match)))


@app.delete("/v1/lists/{list_id}", status_code=204)
def delete_list(
    list_id: str,
    store: AnyStorage = Depends(get_storage),
    if_match: str = Header(..., alias="If-Match"),
):
    store.delete_list(list_id, expected_version(if_match))
    return Response(status_code=204)


# === Item endpoints ===


@app.post("/v1/lists/{list_id}/items", response_model=ItemOut, status_code=201)
def create_item(list_id: str, payload: ItemIn, store: AnyStorage = Depends(get_storage)):
    item = store.create_item(list_id, payload.label, payload.afterItemId, payload.beforeItemId)
    return item_out(item)


@app.post("/v1/lists/{list_id}/items:bulk", response_model=ItemsOut, status_code=201)
def create_items(list_id: str, payload: ItemsIn, store: AnyStorage = Depends(get_storage)):
    items = store.create_items(list_id, payload.labels, payload.afterItemId, payload.beforeItemId)
    return ItemsOut(items=[item_out(i) for i in items])


@app.post("/v1/lists/{list_id}/items/{item_id}:move", response_model=ItemOut)
def move_item(
    list_id: str,
    item_id: str,
    payload: ItemMove,
    store: AnyStorage = Depends(get_storage),
):
    item = store.move_item(
        list_id,
        item_id,
        payload.afterItemId,
        payload.beforeItemId,
        expected_version=payload.expectedVersion,
    )
    return item_out(item)


@app.delete("/v1/lists/{list_id}/items/{item_id}", status_code=204)
def delete_item(list_id: str, item_id: str, store: AnyStorage = Depends(get_storage)):
    store.delete_item(list_id, item_id)
    return Response(status_code=204)
