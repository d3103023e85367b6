"""
테스트용 인메모리 MongoDB 대역.

AsyncMongoClient 의 일부(ping, close, get_database, 컬렉션 CRUD)만 흉내낸다.
덱 컬렉션의 game_id 유일 인덱스는 대소문자 무시로 강제한다.
"""

import asyncio
from types import SimpleNamespace

import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from app.database import MongoConnectionManager
from app.models.deck import DECK_COLLECTION


def _norm(value, collation):
    if collation is not None and isinstance(value, str):
        return value.casefold()
    return value


def _matches(doc, query, collation):
    return all(_norm(doc.get(k), collation) == _norm(v, collation) for k, v in query.items())


class FakeCursor:
    def __init__(self, docs):
        self._docs = list(docs)

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for doc in self._docs:
            yield doc

    async def to_list(self, length=None):
        return self._docs[:length] if length else list(self._docs)


class FakeCollection:
    def __init__(self, name, unique_key=None):
        self.name = name
        self.unique_key = unique_key
        self.docs = []
        self.indexes = []
        self.collation = None

    async def insert_one(self, doc):
        if self.unique_key is not None:
            key = str(doc.get(self.unique_key)).casefold()
            if any(str(d.get(self.unique_key)).casefold() == key for d in self.docs):
                raise DuplicateKeyError(f"E11000 duplicate key error: {self.unique_key}", 11000)
        stored = dict(doc)
        stored.setdefault("_id", ObjectId())
        self.docs.append(stored)
        return SimpleNamespace(inserted_id=stored["_id"])

    async def find_one(self, query, collation=None):
        for doc in self.docs:
            if _matches(doc, query, collation):
                return dict(doc)
        return None

    def find(self, query, sort=None, collation=None, limit=0):
        docs = [dict(d) for d in self.docs if _matches(d, query, collation)]
        for key, direction in reversed(sort or []):
            docs.sort(key=lambda d: _norm(d.get(key), collation), reverse=direction < 0)
        if limit:
            docs = docs[:limit]
        return FakeCursor(docs)

    async def update_one(self, query, update, collation=None):
        for doc in self.docs:
            if _matches(doc, query, collation):
                doc.update(update.get("$set", {}))
                return SimpleNamespace(matched_count=1, modified_count=1)
        return SimpleNamespace(matched_count=0, modified_count=0)

    async def create_indexes(self, indexes):
        self.indexes.extend(index.document for index in indexes)
        return [index.document["name"] for index in indexes]


class FakeDatabase:
    def __init__(self, name):
        self.name = name
        self.collections = {}

    def __getitem__(self, name):
        if name not in self.collections:
            unique_key = "game_id" if name == DECK_COLLECTION else None
            self.collections[name] = FakeCollection(name, unique_key=unique_key)
        return self.collections[name]

    async def list_collection_names(self):
        return list(self.collections)

    async def create_collection(self, name, collation=None):
        collection = self[name]
        collection.collation = collation
        return collection


class FakeAdmin:
    def __init__(self, client):
        self.client = client

    async def command(self, name):
        self.client.commands.append(name)
        if self.client.gate is not None:
            await self.client.gate.wait()
        if self.client.error is not None:
            raise self.client.error
        return {"ok": 1.0}


class FakeClient:
    def __init__(self, uri, gate=None, error=None, **options):
        self.uri = uri
        self.options = options
        self.gate = gate
        self.error = error
        self.commands = []
        self.closed = False
        self.admin = FakeAdmin(self)
        self.databases = {}

    def get_database(self, name):
        return self.databases.setdefault(name, FakeDatabase(name))

    def get_default_database(self, default=None):
        # mongodb://host:port/<db> 형태만 처리
        path = self.uri.rsplit("/", 1)[-1].split("?")[0] if self.uri.count("/") >= 3 else ""
        return self.get_database(path or default)

    async def close(self):
        self.closed = True


class ClientFactory:
    """연결 시도 횟수와 생성된 클라이언트를 기록하는 팩토리."""

    def __init__(self, gate=None, error=None):
        self.gate = gate
        self.error = error
        self.clients = []

    def __call__(self, uri, **options):
        client = FakeClient(uri, gate=self.gate, error=self.error, **options)
        self.clients.append(client)
        return client

    @property
    def calls(self):
        return len(self.clients)


@pytest.fixture
def client_factory():
    return ClientFactory()


@pytest.fixture
def manager(client_factory):
    return MongoConnectionManager(
        uri="mongodb://db.test:27017/visualdilemma_test",
        client_factory=client_factory,
    )


@pytest.fixture
def fake_db():
    return FakeDatabase("visualdilemma_test")


@pytest.fixture
def gate():
    return asyncio.Event()


def make_deck(game_id="dilema-1", options=2, **overrides):
    deck = {
        "game_id": game_id,
        "version": "1.0.0",
        "title": "El tranvía",
        "description": "Dilemas clásicos",
        "scenes": [
            {
                "scene_id": "s1",
                "image_url": "https://cdn.test/s1.png",
                "title": "Primera escena",
                "comment": "¿Qué harías?",
                "options": [
                    {"label": f"Opción {i}", "ref_valor": f"valor-{i}"} for i in range(options)
                ],
            }
        ],
    }
    deck.update(overrides)
    return deck


def make_choice(**overrides):
    choice = {
        "session_id": "sess-1",
        "game_id": "dilema-1",
        "scene_id": "s1",
        "chosen_option": "valor-0",
    }
    choice.update(overrides)
    return choice
