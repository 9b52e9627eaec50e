import os

os.environ["ENVIRONMENT"] = "test"
os.environ.setdefault("ACCESS_TOKEN_SECRET", "test-secret")

import asyncio  # noqa: E402
from types import SimpleNamespace  # noqa: E402

import pytest  # noqa: E402
from bson import ObjectId  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from pymongo import ASCENDING, DESCENDING  # noqa: E402
from pymongo.errors import PyMongoError  # noqa: E402

from app_factory import create_app  # noqa: E402
from database import get_mongo_db  # noqa: E402


def _matches(document, query):
    return all(document.get(key) == value for key, value in query.items())


def _project(document, projection):
    if not projection:
        return dict(document)
    if any(projection.values()):
        keep = {key for key, flag in projection.items() if flag}
        keep.add("_id")
        return {key: value for key, value in document.items() if key in keep}
    return {key: value for key, value in document.items() if key not in projection}


def _sort_key(value):
    return (0,) if value is None else (1, value)


class FakeCursor:
    def __init__(self, documents):
        self._documents = documents

    def sort(self, key_or_list, direction=ASCENDING):
        keys = key_or_list if isinstance(key_or_list, list) else [(key_or_list, direction)]
        for key, order in reversed(keys):
            self._documents.sort(key=lambda d: _sort_key(d.get(key)), reverse=order == DESCENDING)
        return self

    def limit(self, count):
        if count:
            self._documents = self._documents[:count]
        return self

    async def to_list(self, length=None):
        return self._documents if length is None else self._documents[:length]


class FakeCollection:
    """
    Sous-ensemble en mémoire de l'API AsyncCollection de pymongo.
    Avec `interleave=True`, chaque appel rend la main à la boucle avant d'agir
    et find_one la rend encore après sa lecture, comme un vrai aller-retour
    réseau ; chaque écriture reste atomique sur un document.
    """

    def __init__(self):
        self.documents = []
        self.fail = False
        self.interleave = False

    async def _round_trip(self):
        if self.fail:
            raise PyMongoError("simulated store failure")
        if self.interleave:
            await asyncio.sleep(0)

    def seed(self, document):
        document = dict(document)
        document.setdefault("_id", ObjectId())
        self.documents.append(document)
        return str(document["_id"])

    def find(self, query=None, projection=None):
        if self.fail:
            raise PyMongoError("simulated store failure")
        found = [_project(d, projection) for d in self.documents if _matches(d, query or {})]
        return FakeCursor(found)

    async def find_one(self, query=None, projection=None):
        await self._round_trip()
        found = None
        for document in self.documents:
            if _matches(document, query or {}):
                found = _project(document, projection)
                break
        if self.interleave:
            await asyncio.sleep(0)
        return found

    async def insert_one(self, document):
        await self._round_trip()
        document.setdefault("_id", ObjectId())
        self.documents.append(dict(document))
        return SimpleNamespace(acknowledged=True, inserted_id=document["_id"])

    async def update_one(self, query, update, upsert=False):
        await self._round_trip()
        changes = update.get("$set", {})
        for document in self.documents:
            if _matches(document, query):
                modified = any(document.get(k) != v for k, v in changes.items())
                document.update(changes)
                return SimpleNamespace(acknowledged=True, matched_count=1, modified_count=int(modified), upserted_id=None)
        if upsert:
            document = {**query, **update.get("$setOnInsert", {}), **changes, "_id": ObjectId()}
            self.documents.append(document)
            return SimpleNamespace(acknowledged=True, matched_count=0, modified_count=0, upserted_id=document["_id"])
        return SimpleNamespace(acknowledged=True, matched_count=0, modified_count=0, upserted_id=None)

    async def delete_one(self, query):
        await self._round_trip()
        for index, document in enumerate(self.documents):
            if _matches(document, query):
                del self.documents[index]
                return SimpleNamespace(acknowledged=True, deleted_count=1)
        return SimpleNamespace(acknowledged=True, deleted_count=0)

    async def count_documents(self, query):
        await self._round_trip()
        return sum(1 for d in self.documents if _matches(d, query))


class FakeDatabase:
    def __init__(self):
        self.collections = {}

    def __getitem__(self, name):
        return self.collections.setdefault(name, FakeCollection())


@pytest.fixture(name="db")
def db_fixture():
    return FakeDatabase()


@pytest.fixture(name="client")
def client_fixture(db: FakeDatabase):
    app = create_app()
    app.dependency_overrides[get_mongo_db] = lambda: db
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="seed_user")
def seed_user_fixture(db: FakeDatabase):
    def _seed(email, role="donor", status="active", **profile):
        return db["users"].seed({"email": email, "role": role, "status": status, **profile})
    return _seed


def login(client: TestClient, email: str):
    """Pose le cookie de session pour `email` sur le client."""
    r = client.post("/jwt", json={"email": email})
    assert r.status_code == 200, r.text
    return r
