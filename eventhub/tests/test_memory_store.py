from datetime import timedelta

from eventhub.discovery.geo import to_geo_point
from eventhub.events.models import EventLocation, EventStatus, derive_status
from eventhub.storage.memory import InMemoryEventRepository, InMemoryUserRepository
from eventhub.storage.repository import EventQuery


def test_status_is_derived_on_load(make_event):
    repo = InMemoryEventRepository(
        [
            make_event("old", days=-3, status="upcoming"),
            make_event("new", days=3, status="past"),
            make_event("off", days=-3, status="cancelled"),
        ]
    )
    assert repo.get("old").status == EventStatus.past
    assert repo.get("new").status == EventStatus.upcoming
    assert repo.get("off").status == EventStatus.cancelled


def test_derive_status_keeps_cancelled(make_event, now):
    event = make_event("e1", days=5, status="cancelled")
    assert derive_status(event, now).status == EventStatus.cancelled
    assert derive_status(make_event("e2", days=-5), now).status == EventStatus.past


def test_find_sorts_by_date_and_pages(make_event):
    repo = InMemoryEventRepository([make_event(f"e{i}", days=5 - i) for i in range(5)])
    everything = repo.find(EventQuery())
    assert [e.id for e in everything] == ["e4", "e3", "e2", "e1", "e0"]
    assert [e.id for e in repo.find(EventQuery(), skip=1, limit=2)] == ["e3", "e2"]
    assert repo.count(EventQuery()) == 5


def test_date_bounds(make_event, now):
    repo = InMemoryEventRepository([make_event(f"e{i}", days=i) for i in (1, 2, 3)])
    query = EventQuery(starts_from=now + timedelta(days=1.5), starts_until=now + timedelta(days=3))
    assert [e.id for e in repo.find(query)] == ["e2", "e3"]
    assert [e.id for e in repo.find(EventQuery(starts_before=now + timedelta(days=2)))] == ["e1"]


def test_field_filters(make_event):
    repo = InMemoryEventRepository(
        [
            make_event("a", city="Seattle", category="Tech", hostedBy="h1"),
            make_event("b", city="Seattle", category="Music", eventType="group"),
            make_event("c", online=True, category="Tech"),
        ]
    )
    assert [e.id for e in repo.find(EventQuery(category="Tech"))] == ["a", "c"]
    assert [e.id for e in repo.find(EventQuery(event_type="group"))] == ["b"]
    assert [e.id for e in repo.find(EventQuery(hosted_by="h1"))] == ["a"]
    assert repo.count(EventQuery(location_type="online")) == 1


def test_save_replaces_and_refreshes_index(make_event):
    repo = InMemoryEventRepository([make_event("a", city="Seattle")])
    assert repo.count(EventQuery(city="portland")) == 0

    repo.save(repo.get("a").model_copy(update={"location": EventLocation(city="Portland")}))
    assert repo.count(EventQuery(city="portland")) == 1
    assert repo.count(EventQuery(city="seattle")) == 0


def test_find_near_orders_by_distance(make_event):
    repo = InMemoryEventRepository(
        [
            make_event("far", days=1, lat=47.7, lng=-122.3),
            make_event("near", days=2, lat=47.61, lng=-122.3),
            make_event("no-point", days=1, city="Seattle"),
            make_event("online", days=1, online=True),
        ]
    )
    hits = repo.find_near(to_geo_point(47.6, -122.3), 20_000, EventQuery())
    assert [e.id for e, _ in hits] == ["near", "far"]
    assert hits[0][1] < hits[1][1] < 20_000

    close = repo.find_near(to_geo_point(47.6, -122.3), 5_000, EventQuery())
    assert [e.id for e, _ in close] == ["near"]


def test_legacy_and_malformed_geo_load(make_event):
    legacy = make_event("legacy", location={"city": "Seattle", "geo": {"lat": "47.6", "lng": "-122.3"}})
    broken = make_event("broken", location={"city": "Seattle", "geo": "somewhere"})
    assert legacy.location.geo.coordinates == [-122.3, 47.6]
    assert broken.location.geo is None

    repo = InMemoryEventRepository([legacy, broken])
    hits = repo.find_near(to_geo_point(47.6, -122.3), 1_000, EventQuery())
    assert [e.id for e, _ in hits] == ["legacy"]


def test_city_counts_group_and_rank(make_event):
    repo = InMemoryEventRepository(
        [
            make_event("s1", location={"city": "Seattle", "state": "WA"}),
            make_event("s2", location={"city": "Seattle", "state": "WA"}),
            make_event("sp", location={"city": "Spokane", "state": "WA"}),
            make_event("sa", location={"city": "Salem", "state": "OR"}),
            make_event("o", online=True),
        ]
    )
    assert [(s.city, s.count) for s in repo.city_counts(None, 10)] == [
        ("Seattle", 2),
        ("Salem", 1),
        ("Spokane", 1),
    ]
    matches = repo.city_counts("SPO", 10)
    assert [(s.type, s.city, s.state) for s in matches] == [("city", "Spokane", "WA")]
    assert len(repo.city_counts(None, 1)) == 1


def test_zip_counts_prefix(make_event):
    repo = InMemoryEventRepository(
        [
            make_event("a", city="Seattle", zip_code="98101"),
            make_event("b", city="Seattle", zip_code="98101"),
            make_event("c", city="Seattle", zip_code="98109"),
            make_event("d", city="Portland", zip_code="97205"),
        ]
    )
    suggestions = repo.zip_counts("981", 10)
    assert [(s.zip_code, s.count) for s in suggestions] == [("98101", 2), ("98109", 1)]
    assert suggestions[0].model_dump(by_alias=True, exclude_none=True) == {
        "type": "zip",
        "city": "Seattle",
        "zipCode": "98101",
        "count": 2,
    }


def test_user_lookup_by_username_ignores_case(make_user):
    users = InMemoryUserRepository([make_user("u1", username="Maya")])
    assert users.get_by_username(" maya ").id == "u1"
    assert users.get_by_username("omar") is None


def test_cities_lists_every_in_person_city(make_event):
    events = [make_event(f"c{i:04d}", city=f"City {i:04d}") for i in range(1200)]
    events += [make_event("dup", city="City 0000"), make_event("o", online=True)]
    cities = InMemoryEventRepository(events).cities()
    assert len(cities) == 1200
    assert cities[0] == "City 0000"
    assert cities[-1] == "City 1199"
