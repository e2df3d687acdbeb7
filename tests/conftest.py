"""
Shared test fixtures.

FakeCollection mimics the slice of the motor collection API the services use
(insert_one, find().sort(), find_one, find_one_and_update) so store behaviour
can be tested without a MongoDB server.
"""

import asyncio
import copy
from unittest.mock import MagicMock, patch

import pytest
from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError


class FakeCursor:
    def __init__(self, docs):
        self._docs = docs

    def sort(self, key, direction=1):
        self._docs = sorted(self._docs, key=lambda d: d.get(key), reverse=direction == -1)
        return self

    def __aiter__(self):
        self._iter = iter(self._docs)
        return self

    async def __anext__(self):
        try:
            return next(self._iter)
        except StopIteration:
            raise StopAsyncIteration


class FakeCollection:
    def __init__(self, unique_keys=()):
        self.docs = []
        self.unique_keys = unique_keys

    @staticmethod
    def _matches(doc, query):
        for key, expected in (query or {}).items():
            if isinstance(expected, dict) and "$exists" in expected:
                if (key in doc) != expected["$exists"]:
                    return False
            elif key not in doc or doc[key] != expected:
                return False
        return True

    @staticmethod
    def _public(doc):
        return {k: copy.deepcopy(v) for k, v in doc.items() if k != "_id"}

    async def insert_one(self, doc):
        for key in self.unique_keys:
            if any(d.get(key) == doc.get(key) for d in self.docs):
                raise DuplicateKeyError(f"E11000 duplicate key error: {key}")
        doc["_id"] = ObjectId()
        self.docs.append(copy.deepcopy(doc))
        return MagicMock(inserted_id=doc["_id"])

    def find(self, query=None, projection=None):
        return FakeCursor([self._public(d) for d in self.docs if self._matches(d, query)])

    async def find_one(self, query, projection=None):
        found = None
        for doc in self.docs:
            if self._matches(doc, query):
                found = self._public(doc)
                break
        # Yield after reading so concurrent read-modify-write callers race
        await asyncio.sleep(0)
        return found

    async def find_one_and_update(
        self, query, update, projection=None, return_document=ReturnDocument.BEFORE
    ):
        for doc in self.docs:
            if not self._matches(doc, query):
                continue
            before = self._public(doc)
            for key, value in update.get("$push", {}).items():
                doc.setdefault(key, []).append(value)
            for key, value in update.get("$set", {}).items():
                doc[key] = value
            for key, value in update.get("$inc", {}).items():
                doc[key] = doc.get(key, 0) + value
            return self._public(doc) if return_document == ReturnDocument.AFTER else before
        return None


class FakeDatabase:
    def __init__(self):
        self.facilities = FakeCollection(unique_keys=("facility_id",))
        self.users = FakeCollection(unique_keys=("user_id", "username"))


@pytest.fixture
def fake_db():
    db = FakeDatabase()
    with patch("wheelmate.services.facility_service.get_db", return_value=db), \
         patch("wheelmate.services.auth_service.get_db", return_value=db):
        yield db


@pytest.fixture
def hospital_input():
    return {
        "name": "City Hospital",
        "address": "1 Main St",
        "type": "hospital",
        "lat": 40.0,
        "lng": -73.0,
    }
