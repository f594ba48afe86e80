import pytest
from fastapi.testclient import TestClient

from midstring.db import SqlStorage, make_engine
from midstring.main import app, get_storage
from midstring.storage import Storage


def make_store(kind):
    if kind == "sql":
        return SqlStorage(make_engine("sqlite://"))
    return Storage()


@pytest.fixture(params=["memory", "sql"])
def store(request):
    return make_store(request.param)


@pytest.fixture(params=["memory", "sql"])
def client(request):
    fresh = make_store(request.param)
    app.dependency_overrides[get_storage] = lambda: fresh
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
