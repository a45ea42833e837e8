from datetime import date

from roomdesk.models.shift import Shift
from roomdesk.models.shift_block import ShiftBlock

DAY = "2024-01-01"


def put_shift(client, headers, profile_id, start, end, day=DAY):
    return client.put(
        "/api/shifts",
        json={"profile_id": profile_id, "date": day, "start_time": start, "end_time": end},
        headers=headers,
    )


def test_shift_upsert_recalculates_blocks(client, seeded):
    first = put_shift(client, seeded["sched"], "alice", "09:00", "12:00")
    assert first.status_code == 200
    assert first.json()["block_count"] == 1
    assert first.json()["shift"]["start_time"] == "09:00"

    second = put_shift(client, seeded["sched"], "bob", "11:00", "14:00")
    assert second.json()["block_count"] == 3

    blocks = client.get("/api/shift-blocks", params={"date": DAY}, headers=seeded["alice"]).json()
    assert [(item["start_time"], item["end_time"]) for item in blocks] == [
        ("09:00", "11:00"),
        ("11:00", "12:00"),
        ("12:00", "14:00"),
    ]
    assert [item["user"] for item in blocks[1]["assignments"]] == ["alice", "bob"]

    shifts = client.get("/api/shifts", params={"dates": [DAY]}, headers=seeded["alice"]).json()
    assert sorted(item["profile_id"] for item in shifts) == ["alice", "bob"]


def test_clearing_a_shift(client, seeded):
    put_shift(client, seeded["alice"], "alice", "09:00", "12:00")

    cleared = client.put("/api/shifts", json={"profile_id": "alice", "date": DAY}, headers=seeded["alice"])

    assert cleared.status_code == 200
    assert cleared.json() == {"shift": None, "block_count": 0}


def test_staff_can_only_edit_their_own_shift(client, seeded):
    assert put_shift(client, seeded["alice"], "alice", "09:00", "12:00").status_code == 200
    assert put_shift(client, seeded["alice"], "bob", "09:00", "12:00").status_code == 403


def test_invalid_shift_payloads(client, seeded):
    assert put_shift(client, seeded["sched"], "alice", "25:00", "26:00").status_code == 422
    assert put_shift(client, seeded["sched"], "alice", "12:00", "09:00").status_code == 422
    assert put_shift(client, seeded["sched"], "alice", "09:00", None).status_code == 422
    assert put_shift(client, seeded["sched"], "nobody", "09:00", "10:00").status_code == 404


def test_requests_need_a_valid_token(client, seeded):
    assert client.get("/api/shift-blocks", params={"date": DAY}).status_code in {401, 403}
    bad = {"Authorization": "Bearer not-a-token"}
    assert client.get("/api/shift-blocks", params={"date": DAY}, headers=bad).status_code == 401


def test_move_rooms_between_staff(client, seeded):
    put_shift(client, seeded["sched"], "alice", "09:00", "12:00")
    put_shift(client, seeded["sched"], "bob", "11:00", "14:00")
    blocks = client.get("/api/shift-blocks", params={"date": DAY}, headers=seeded["sched"]).json()

    replaced = client.put(
        f"/api/shift-blocks/{DAY}",
        json={
            "blocks": [
                {
                    "start_time": item["start_time"],
                    "end_time": item["end_time"],
                    "assignments": [
                        {"user": entry["user"], "rooms": ["GH 101", "GH 102"] if entry["user"] == "alice" else []}
                        for entry in item["assignments"]
                    ],
                }
                for item in blocks
            ]
        },
        headers=seeded["sched"],
    )
    assert replaced.status_code == 200
    middle = replaced.json()[1]

    moved = client.post(
        f"/api/shift-blocks/{DAY}/move",
        json={"block_id": middle["id"], "rooms": ["GH 101", "GH 102"], "target": "bob"},
        headers=seeded["sched"],
    )

    assert moved.status_code == 200
    block = moved.json()["block"]
    assert {entry["user"]: entry["rooms"] for entry in block["assignments"]} == {
        "alice": [],
        "bob": ["GH 101", "GH 102"],
    }
    assert moved.json()["blocks"][0]["assignments"][0]["rooms"] == ["GH 101", "GH 102"]

    notifications = client.get("/api/notifications", params={"notification_type": "schedule"}, headers=seeded["bob"])
    assert any("GH 101" in item["message"] for item in notifications.json())


def test_move_to_staff_off_shift_is_rejected(client, seeded):
    put_shift(client, seeded["sched"], "alice", "09:00", "12:00")
    block = client.get("/api/shift-blocks", params={"date": DAY}, headers=seeded["sched"]).json()[0]

    response = client.post(
        f"/api/shift-blocks/{DAY}/move",
        json={"block_id": block["id"], "rooms": ["GH 101"], "target": "bob"},
        headers=seeded["sched"],
    )

    assert response.status_code == 422
    assert "not on shift" in response.json()["message"]


def test_replace_rejects_double_assigned_rooms(client, seeded):
    response = client.put(
        f"/api/shift-blocks/{DAY}",
        json={
            "blocks": [
                {
                    "start_time": "09:00",
                    "end_time": "10:00",
                    "assignments": [{"user": "alice", "rooms": ["GH 101"]}, {"user": "bob", "rooms": ["GH 101"]}],
                }
            ]
        },
        headers=seeded["sched"],
    )

    assert response.status_code == 422


def test_copy_day_and_coverage(client, seeded):
    put_shift(client, seeded["sched"], "alice", "09:00", "12:00")

    copied = client.post(
        "/api/shifts/copy-day",
        json={"source_date": DAY, "target_date": "2024-01-08"},
        headers=seeded["sched"],
    )
    assert copied.status_code == 200
    assert copied.json()["shifts_copied"] == 1
    assert copied.json()["blocks_copied"] == 1

    coverage = client.get("/api/rooms/coverage", params={"date": "2024-01-08"}, headers=seeded["alice"]).json()
    assert coverage["all_assigned"] is False
    assert "GH 101" in coverage["unassigned"]

    week = client.post(
        "/api/shifts/copy-week",
        json={"source_week_start": DAY, "target_week_start": "2024-01-15", "days": 2},
        headers=seeded["sched"],
    )
    assert [item["target_date"] for item in week.json()] == ["2024-01-15", "2024-01-16"]

    assert client.post(
        "/api/shifts/copy-day",
        json={"source_date": DAY, "target_date": "2024-01-08"},
        headers=seeded["alice"],
    ).status_code == 403


def test_clear_day(client, seeded):
    put_shift(client, seeded["sched"], "alice", "09:00", "12:00")

    response = client.delete("/api/shifts", params={"date": DAY}, headers=seeded["sched"])

    assert response.status_code == 200
    assert client.get("/api/shift-blocks", params={"date": DAY}, headers=seeded["sched"]).json() == []


def test_move_ignores_stale_zero_duration_rows(client, seeded, session_factory):
    put_shift(client, seeded["sched"], "alice", "09:00", "12:00")
    with session_factory() as session:
        session.add(ShiftBlock(date=date(2024, 1, 1), start_time="08:00", end_time="08:00", assignments=[]))
        session.commit()
    blocks = client.get("/api/shift-blocks", params={"date": DAY}, headers=seeded["sched"]).json()
    real = next(item for item in blocks if item["start_time"] == "09:00")

    moved = client.post(
        f"/api/shift-blocks/{DAY}/move",
        json={"block_id": real["id"], "rooms": ["GH 101"], "target": "alice"},
        headers=seeded["sched"],
    )

    assert moved.status_code == 200
    assert (moved.json()["block"]["start_time"], moved.json()["block"]["end_time"]) == ("09:00", "12:00")
    assert moved.json()["block"]["assignments"] == [{"user": "alice", "rooms": ["GH 101"]}]
    assert len(moved.json()["blocks"]) == 1
    assert moved.json()["all_rooms_assigned"] is False


def test_recalculate_endpoint_rebuilds_blocks_from_shifts(client, seeded, session_factory):
    put_shift(client, seeded["sched"], "alice", "09:00", "12:00")
    with session_factory() as session:
        session.add(Shift(profile_id="bob", date=date(2024, 1, 1), start_time="11:00", end_time="13:00"))
        session.commit()

    assert client.post(f"/api/shift-blocks/{DAY}/recalculate", headers=seeded["alice"]).status_code == 403
    response = client.post(f"/api/shift-blocks/{DAY}/recalculate", headers=seeded["sched"])

    assert response.status_code == 200
    assert [(item["start_time"], item["end_time"]) for item in response.json()] == [
        ("09:00", "11:00"),
        ("11:00", "12:00"),
        ("12:00", "13:00"),
    ]
