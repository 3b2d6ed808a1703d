"""
MongoDB-backed repositories.

Events are stored with the camelCase field names they are served with and a
GeoJSON ``location.geo`` point under a ``2dsphere`` index.
"""
from __future__ import annotations

import logging
import re
from typing import Any

from bson import ObjectId
from pymongo import ASCENDING, GEOSPHERE, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database

from ..discovery.geo import GeoPoint
from ..events.models import Event, LocationType, User, derive_status
from .config import DEFAULT_STORE_CONFIG, StoreConfig
from .repository import EventQuery, LocationSuggestion

logger = logging.getLogger(__name__)


def _id_filter(raw_id: str) -> dict[str, Any]:
    if ObjectId.is_valid(raw_id):
        return {"_id": {"$in": [raw_id, ObjectId(raw_id)]}}
    return {"_id": raw_id}


def _ci_exact(value: str) -> dict[str, str]:
    return {"$regex": f"^{re.escape(value.strip())}$", "$options": "i"}


def _ci_contains(value: str) -> dict[str, str]:
    return {"$regex": re.escape(value), "$options": "i"}


def build_event_match(query: EventQuery) -> dict[str, Any]:
    """Translate an :class:`EventQuery` into a MongoDB filter document."""
    match: dict[str, Any] = {}

    if query.category:
        match["category"] = query.category
    if query.location_type:
        match["locationType"] = query.location_type
    if query.event_type:
        match["eventType"] = query.event_type
    if query.hosted_by:
        match["hostedBy"] = query.hosted_by

    status: dict[str, Any] = {}
    if query.status:
        status["$eq"] = query.status
    if query.exclude_status:
        status["$ne"] = query.exclude_status
    if status:
        match["status"] = status

    dates: dict[str, Any] = {}
    if query.starts_from is not None:
        dates["$gte"] = query.starts_from
    if query.starts_until is not None:
        dates["$lte"] = query.starts_until
    if query.starts_before is not None:
        dates["$lt"] = query.starts_before
    if dates:
        match["dateAndTime"] = dates

    if query.city:
        match["location.city"] = _ci_exact(query.city)
    if query.zip_code:
        match["location.zipCode"] = query.zip_code.strip()

    if query.text:
        match["$or"] = [
            {"title": _ci_contains(query.text)},
            {"description": _ci_contains(query.text)},
            {"category": _ci_contains(query.text)},
        ]

    return match


def build_geo_near_stage(point: GeoPoint, max_meters: float, query: EventQuery) -> dict[str, Any]:
    return {
        "$geoNear": {
            "near": point.model_dump(),
            "key": "location.geo",
            "distanceField": "distanceMeters",
            "maxDistance": max_meters,
            "spherical": True,
            "query": build_event_match(query),
        }
    }


def build_location_pipeline(
    match: dict[str, Any], group_fields: dict[str, str], sort_field: str, kind: str, limit: int
) -> list[dict[str, Any]]:
    project: dict[str, Any] = {"_id": 0, "type": {"$literal": kind}, "count": 1}
    for name in group_fields:
        project[name] = f"$_id.{name}"
    return [
        {"$match": match},
        {"$group": {"_id": group_fields, "count": {"$sum": 1}}},
        {"$sort": {"count": -1, f"_id.{sort_field}": 1}},
        {"$limit": limit},
        {"$project": project},
    ]


def _to_event(doc: dict[str, Any]) -> Event:
    doc = dict(doc)
    doc["id"] = str(doc.pop("_id"))
    doc.pop("distanceMeters", None)
    if doc.get("hostedBy") is not None:
        doc["hostedBy"] = str(doc["hostedBy"])
    return derive_status(Event.model_validate(doc))


def _to_user(doc: dict[str, Any]) -> User:
    doc = dict(doc)
    doc["id"] = str(doc.pop("_id"))
    doc["passwordHash"] = doc.pop("password", doc.get("passwordHash"))
    return User.model_validate(doc)


class MongoEventRepository:
    def __init__(self, collection: Collection) -> None:
        self._col = collection

    def ensure_indexes(self) -> None:
        self._col.create_index([("dateAndTime", ASCENDING)])
        self._col.create_index([("category", ASCENDING)])
        self._col.create_index([("locationType", ASCENDING)])
        self._col.create_index([("hostedBy", ASCENDING)])
        self._col.create_index([("status", ASCENDING)])
        self._col.create_index([("location.geo", GEOSPHERE)])

    def get(self, event_id: str) -> Event | None:
        doc = self._col.find_one(_id_filter(event_id))
        return _to_event(doc) if doc else None

    def find(
        self, query: EventQuery, *, skip: int = 0, limit: int | None = None
    ) -> list[Event]:
        cursor = self._col.find(build_event_match(query)).sort("dateAndTime", ASCENDING).skip(skip)
        if limit is not None:
            cursor = cursor.limit(limit)
        return [_to_event(doc) for doc in cursor]

    def count(self, query: EventQuery) -> int:
        return self._col.count_documents(build_event_match(query))

    def find_near(
        self,
        point: GeoPoint,
        max_meters: float,
        query: EventQuery,
        *,
        limit: int | None = None,
    ) -> list[tuple[Event, float]]:
        pipeline: list[dict[str, Any]] = [build_geo_near_stage(point, max_meters, query)]
        if limit is not None:
            pipeline.append({"$limit": limit})
        return [
            (_to_event(doc), float(doc["distanceMeters"]))
            for doc in self._col.aggregate(pipeline)
        ]

    def save(self, event: Event) -> Event:
        event = derive_status(event)
        doc = event.model_dump(by_alias=True, exclude={"id"}, mode="json")
        doc["dateAndTime"] = event.date_and_time
        self._col.replace_one(_id_filter(event.id), doc, upsert=True)
        return event

    def city_counts(self, needle: str | None, limit: int) -> list[LocationSuggestion]:
        city: dict[str, Any] = {"$exists": True, "$ne": ""}
        if needle:
            city.update(_ci_contains(needle))
        match = {"locationType": LocationType.in_person.value, "location.city": city}
        pipeline = build_location_pipeline(
            match,
            {"city": "$location.city", "state": "$location.state"},
            "city",
            "city",
            limit,
        )
        return [LocationSuggestion.model_validate(doc) for doc in self._col.aggregate(pipeline)]

    def cities(self) -> list[str]:
        names = self._col.distinct(
            "location.city",
            {"locationType": LocationType.in_person.value, "location.city": {"$exists": True, "$ne": ""}},
        )
        return sorted({n for n in names if isinstance(n, str) and n})

    def zip_counts(self, prefix: str, limit: int) -> list[LocationSuggestion]:
        match = {
            "locationType": LocationType.in_person.value,
            "location.zipCode": {"$exists": True, "$ne": "", "$regex": f"^{re.escape(prefix)}"},
        }
        pipeline = build_location_pipeline(
            match,
            {"zipCode": "$location.zipCode", "city": "$location.city", "state": "$location.state"},
            "zipCode",
            "zip",
            limit,
        )
        return [LocationSuggestion.model_validate(doc) for doc in self._col.aggregate(pipeline)]


class MongoUserRepository:
    def __init__(self, collection: Collection) -> None:
        self._col = collection

    def get(self, user_id: str) -> User | None:
        doc = self._col.find_one(_id_filter(user_id))
        return _to_user(doc) if doc else None

    def get_by_username(self, username: str) -> User | None:
        doc = self._col.find_one({"username": username.strip().lower()})
        return _to_user(doc) if doc else None


def connect(config: StoreConfig = DEFAULT_STORE_CONFIG) -> Database:
    client: MongoClient = MongoClient(config.mongodb_uri, tz_aware=True)
    logger.info("Connected to MongoDB database %s", config.database)
    return client[config.database]
