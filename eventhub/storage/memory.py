from __future__ import annotations

import logging
from typing import Iterable

import numpy as np
import pandas as pd
from sklearn.metrics.pairwise import haversine_distances

from ..discovery.geo import EARTH_RADIUS_KM, GeoPoint
from ..events.models import Event, LocationType, User, derive_status
from .repository import EventQuery, LocationSuggestion

logger = logging.getLogger(__name__)

_COLUMNS = [
    "id",
    "title_lower",
    "description_lower",
    "category",
    "category_lower",
    "event_type",
    "location_type",
    "status",
    "hosted_by",
    "date",
    "city",
    "city_lower",
    "state",
    "zip_code",
    "lat",
    "lng",
]


def _row(event: Event) -> dict:
    loc = event.location
    geo = loc.geo
    return {
        "id": event.id,
        "title_lower": event.title.lower(),
        "description_lower": event.description.lower(),
        "category": event.category,
        "category_lower": event.category.lower(),
        "event_type": event.event_type.value,
        "location_type": event.location_type.value,
        "status": event.status.value,
        "hosted_by": event.hosted_by,
        "date": event.date_and_time,
        "city": loc.city or "",
        "city_lower": (loc.city or "").lower(),
        "state": loc.state,
        "zip_code": loc.zip_code or "",
        "lat": geo.lat if geo else np.nan,
        "lng": geo.lng if geo else np.nan,
    }


def _build_frame(events: Iterable[Event]) -> pd.DataFrame:
    df = pd.DataFrame([_row(e) for e in events], columns=_COLUMNS)
    df["date"] = pd.to_datetime(df["date"], utc=True)
    df["lat"] = df["lat"].astype(float)
    df["lng"] = df["lng"].astype(float)
    return df


def _mask(df: pd.DataFrame, query: EventQuery) -> pd.Series:
    mask = pd.Series(True, index=df.index)

    if query.category:
        mask &= df["category"] == query.category
    if query.location_type:
        mask &= df["location_type"] == query.location_type
    if query.event_type:
        mask &= df["event_type"] == query.event_type
    if query.status:
        mask &= df["status"] == query.status
    if query.exclude_status:
        mask &= df["status"] != query.exclude_status
    if query.hosted_by:
        mask &= df["hosted_by"] == query.hosted_by

    if query.starts_from is not None:
        mask &= df["date"] >= pd.Timestamp(query.starts_from)
    if query.starts_until is not None:
        mask &= df["date"] <= pd.Timestamp(query.starts_until)
    if query.starts_before is not None:
        mask &= df["date"] < pd.Timestamp(query.starts_before)

    if query.city:
        mask &= df["city_lower"] == query.city.strip().lower()
    if query.zip_code:
        mask &= df["zip_code"] == query.zip_code.strip()

    if query.text:
        needle = query.text.lower()
        mask &= (
            df["title_lower"].str.contains(needle, regex=False)
            | df["description_lower"].str.contains(needle, regex=False)
            | df["category_lower"].str.contains(needle, regex=False)
        )

    return mask


class InMemoryEventRepository:
    """Process-local event store with a lazily rebuilt DataFrame index."""

    def __init__(self, events: Iterable[Event] = ()) -> None:
        self._events: dict[str, Event] = {}
        self._df: pd.DataFrame | None = None
        for event in events:
            self._events[event.id] = derive_status(event)

    def _frame(self) -> pd.DataFrame:
        if self._df is None:
            self._df = _build_frame(self._events.values())
        return self._df

    def _materialise(self, ids: Iterable[str]) -> list[Event]:
        return [self._events[i] for i in ids]

    def get(self, event_id: str) -> Event | None:
        return self._events.get(event_id)

    def find(
        self, query: EventQuery, *, skip: int = 0, limit: int | None = None
    ) -> list[Event]:
        df = self._frame()
        hits = df.loc[_mask(df, query)].sort_values("date", kind="stable")
        end = None if limit is None else skip + limit
        return self._materialise(hits["id"].iloc[skip:end])

    def count(self, query: EventQuery) -> int:
        df = self._frame()
        return int(_mask(df, query).sum())

    def find_near(
        self,
        point: GeoPoint,
        max_meters: float,
        query: EventQuery,
        *,
        limit: int | None = None,
    ) -> list[tuple[Event, float]]:
        df = self._frame()
        candidates = df.loc[_mask(df, query) & df["lat"].notna() & df["lng"].notna()]
        if candidates.empty:
            return []

        origin = np.radians([[point.lat, point.lng]])
        targets = np.radians(candidates[["lat", "lng"]].to_numpy())
        meters = haversine_distances(origin, targets)[0] * EARTH_RADIUS_KM * 1000.0

        inside = np.flatnonzero(meters <= max_meters)
        order = inside[np.argsort(meters[inside], kind="stable")]
        logger.debug("%d of %d geo candidates within %.0fm", len(inside), len(candidates), max_meters)
        if limit is not None:
            order = order[:limit]

        ids = candidates["id"].to_numpy()
        return [(self._events[ids[i]], float(meters[i])) for i in order]

    def save(self, event: Event) -> Event:
        event = derive_status(event)
        self._events[event.id] = event
        self._df = None
        return event

    def city_counts(self, needle: str | None, limit: int) -> list[LocationSuggestion]:
        df = self._frame()
        rows = df.loc[(df["location_type"] == LocationType.in_person.value) & (df["city"] != "")]
        if needle:
            rows = rows.loc[rows["city_lower"].str.contains(needle.lower(), regex=False)]
        grouped = (
            rows.groupby(["city", "state"], dropna=False)
            .size()
            .reset_index(name="count")
            .sort_values(["count", "city"], ascending=[False, True], kind="stable")
            .head(limit)
        )
        return [
            LocationSuggestion(
                type="city",
                city=r["city"],
                state=r["state"] if pd.notna(r["state"]) else None,
                count=int(r["count"]),
            )
            for _, r in grouped.iterrows()
        ]

    def cities(self) -> list[str]:
        df = self._frame()
        rows = df.loc[(df["location_type"] == LocationType.in_person.value) & (df["city"] != "")]
        return sorted(rows["city"].unique().tolist())

    def zip_counts(self, prefix: str, limit: int) -> list[LocationSuggestion]:
        df = self._frame()
        rows = df.loc[
            (df["location_type"] == LocationType.in_person.value)
            & (df["zip_code"] != "")
            & df["zip_code"].str.startswith(prefix)
        ]
        grouped = (
            rows.groupby(["zip_code", "city", "state"], dropna=False)
            .size()
            .reset_index(name="count")
            .sort_values(["count", "zip_code"], ascending=[False, True], kind="stable")
            .head(limit)
        )
        return [
            LocationSuggestion(
                type="zip",
                zip_code=r["zip_code"],
                city=r["city"] or None,
                state=r["state"] if pd.notna(r["state"]) else None,
                count=int(r["count"]),
            )
            for _, r in grouped.iterrows()
        ]


class InMemoryUserRepository:
    def __init__(self, users: Iterable[User] = ()) -> None:
        self._users: dict[str, User] = {u.id: u for u in users}

    def get(self, user_id: str) -> User | None:
        return self._users.get(user_id)

    def get_by_username(self, username: str) -> User | None:
        wanted = username.strip().lower()
        for user in self._users.values():
            if user.username.lower() == wanted:
                return user
        return None

    def add(self, user: User) -> User:
        self._users[user.id] = user
        return user
