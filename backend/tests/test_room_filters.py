from datetime import date

import pytest

from roomdesk.models.event import Event
from roomdesk.services.room_filters import room_matches

DAY = "2024-01-01"


def _save(client, headers, name, display_rooms=(), notify_rooms=(), is_default=False):
    return client.post(
        "/api/room-filters",
        json={
            "name": name,
            "display_rooms": list(display_rooms),
            "notify_rooms": list(notify_rooms),
            "is_default": is_default,
        },
        headers=headers,
    )


@pytest.fixture()
def day_events(seeded, session_factory):
    with session_factory() as session:
        session.add_all(
            [
                Event(event_name="Circuits", event_type="Lecture", room_name="GH 101", date=date(2024, 1, 1),
                      start_time="09:00", end_time="10:00", resources=[]),
                Event(event_name="Statics", event_type="Lecture", room_name="GH 102", date=date(2024, 1, 1),
                      start_time="10:00", end_time="11:00", resources=[]),
                Event(event_name="Merged Lab", event_type="Lecture", room_name="GH 1420&30", date=date(2024, 1, 1),
                      start_time="11:00", end_time="12:00", resources=[]),
            ]
        )
        session.commit()


def test_room_matches_expands_merged_rooms():
    rooms = frozenset({"GH 1430"})

    assert room_matches("GH 1420&30", rooms) is True
    assert room_matches("GH 101", rooms) is False
    assert room_matches(None, rooms) is False
    assert room_matches("GH 101", None) is True


def test_saving_a_filter_makes_it_current(client, seeded):
    response = _save(client, seeded["alice"], "  My   rooms ", display_rooms=["GH 101", "GH 101", "GH 102"])

    assert response.status_code == 201
    assert response.json()["name"] == "My rooms"
    assert response.json()["display_rooms"] == ["GH 101", "GH 102"]
    assert response.json()["owner_id"] == "alice"
    me = client.get("/api/profiles/me", headers=seeded["alice"]).json()
    assert me["current_filter"] == "My rooms"


def test_shared_filters_are_admin_only_and_visible_to_everyone(client, seeded):
    assert _save(client, seeded["alice"], "Shared", is_default=True).status_code == 403
    shared = _save(client, seeded["admin"], "Shared", display_rooms=["GH 101"], is_default=True)
    own = _save(client, seeded["alice"], "Zeta", display_rooms=["GH 102"])

    assert shared.status_code == 201
    assert shared.json()["owner_id"] is None
    alice = client.get("/api/room-filters", headers=seeded["alice"]).json()
    bob = client.get("/api/room-filters", headers=seeded["bob"]).json()
    assert [item["name"] for item in alice] == [own.json()["name"], "Shared"]
    assert [item["name"] for item in bob] == ["Shared"]


def test_duplicate_name_in_the_same_scope_conflicts(client, seeded):
    assert _save(client, seeded["alice"], "Mine").status_code == 201
    assert _save(client, seeded["alice"], "Mine").status_code == 409
    assert _save(client, seeded["bob"], "Mine").status_code == 201


def test_load_switches_current_filter(client, seeded):
    first = _save(client, seeded["alice"], "First").json()
    _save(client, seeded["alice"], "Second")
    bobs = _save(client, seeded["bob"], "Bobs").json()

    loaded = client.post(f"/api/room-filters/{first['id']}/load", headers=seeded["alice"])
    hidden = client.post(f"/api/room-filters/{bobs['id']}/load", headers=seeded["alice"])

    assert loaded.status_code == 200
    assert client.get("/api/profiles/me", headers=seeded["alice"]).json()["current_filter"] == "First"
    assert hidden.status_code == 404


def test_only_owner_deletes_a_filter(client, seeded):
    created = _save(client, seeded["alice"], "Mine").json()

    by_bob = client.delete(f"/api/room-filters/{created['id']}", headers=seeded["bob"])
    by_alice = client.delete(f"/api/room-filters/{created['id']}", headers=seeded["alice"])

    assert by_bob.status_code == 404
    assert by_alice.status_code == 200
    assert by_alice.json() == {"deleted": created["id"]}
    assert client.get("/api/room-filters", headers=seeded["alice"]).json() == []
    assert client.get("/api/profiles/me", headers=seeded["alice"]).json()["current_filter"] is None


def test_filtered_event_list_uses_display_rooms(client, seeded, day_events):
    unfiltered = client.get("/api/events", params={"date": DAY, "filtered": True}, headers=seeded["alice"]).json()
    _save(client, seeded["alice"], "Upstairs", display_rooms=["GH 101", "GH 1430"])
    filtered = client.get("/api/events", params={"date": DAY, "filtered": True}, headers=seeded["alice"]).json()

    assert len(unfiltered) == 3
    assert [item["event_name"] for item in filtered] == ["Circuits", "Merged Lab"]
