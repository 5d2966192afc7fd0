from typing import Any

import pytest
from canteen_booking.routers import canteens as router
from canteen_booking.schemas import CanteenCreate, CanteenUpdate
from fastapi import HTTPException

HOURS = [{"meal": "breakfast", "from": "08:00", "to": "10:00"}]


@pytest.fixture
def audit_calls(monkeypatch: pytest.MonkeyPatch) -> list[dict[str, Any]]:
    calls: list[dict[str, Any]] = []

    def fake_emit(**kwargs: Any) -> None:
        calls.append(kwargs)

    monkeypatch.setattr(router, "emit_audit_log", fake_emit)
    return calls


@pytest.fixture
def admin_id(student_repo) -> str:  # type: ignore[no-untyped-def]
    student_repo.add(50, is_admin=True)
    return "50"


async def _create(canteen_repo, student_repo, student_id: str, **overrides):  # type: ignore[no-untyped-def]
    fields: dict[str, Any] = {"name": "Main", "location": "Block A", "capacity": 20, "workingHours": HOURS}
    fields.update(overrides)
    return await router.create_canteen(
        payload=CanteenCreate.model_validate(fields),
        canteen_repo=canteen_repo,
        student_repo=student_repo,
        student_id=student_id,
    )


@pytest.mark.asyncio
async def test_create_canteen_as_admin(canteen_repo, student_repo, admin_id, audit_calls) -> None:
    result = await _create(canteen_repo, student_repo, admin_id)

    assert result.id == 1
    assert result.working_hours[0].start == "08:00"
    assert result.model_dump(by_alias=True)["workingHours"][0] == {"meal": "breakfast", "from": "08:00", "to": "10:00"}
    assert audit_calls == [{"action": "canteen.created", "initiator": "admin", "student_id": 50, "canteen_id": 1}]


@pytest.mark.asyncio
async def test_create_canteen_status_codes(canteen_repo, student_repo, admin_id, audit_calls) -> None:
    with pytest.raises(HTTPException) as forbidden:
        await _create(canteen_repo, student_repo, "3")
    with pytest.raises(HTTPException) as invalid:
        await _create(canteen_repo, student_repo, admin_id, workingHours=[{"meal": "brunch", "from": "08:00", "to": "10:00"}])

    assert forbidden.value.status_code == 403
    assert invalid.value.status_code == 400
    assert audit_calls == []


@pytest.mark.asyncio
async def test_get_update_delete(canteen_repo, student_repo, admin_id, audit_calls) -> None:
    created = await _create(canteen_repo, student_repo, admin_id)

    fetched = await router.get_canteen(canteen_id=created.id, canteen_repo=canteen_repo)
    assert fetched.name == "Main"

    updated = await router.update_canteen(
        payload=CanteenUpdate(capacity=35),
        canteen_id=created.id,
        canteen_repo=canteen_repo,
        student_repo=student_repo,
        student_id=admin_id,
    )
    assert updated.capacity == 35

    response = await router.delete_canteen(
        canteen_id=created.id,
        canteen_repo=canteen_repo,
        student_repo=student_repo,
        student_id=admin_id,
    )
    assert response.status_code == 204
    assert [c["action"] for c in audit_calls] == ["canteen.created", "canteen.updated", "canteen.deleted"]

    with pytest.raises(HTTPException) as excinfo:
        await router.get_canteen(canteen_id=created.id, canteen_repo=canteen_repo)
    assert excinfo.value.status_code == 404


@pytest.mark.asyncio
async def test_canteen_status_endpoints(canteen_repo, store, canteen_factory) -> None:
    canteen_repo.add(canteen_factory(1, capacity=4))
    store.strings["slot:1:2099-01-05:08:00"] = "3"
    window = {
        "start_date": "2099-01-05",
        "start_time": "08:00",
        "end_date": "2099-01-05",
        "end_time": "09:00",
        "duration": "30",
    }

    single = await router.canteen_status(canteen_id=1, canteen_repo=canteen_repo, store=store, **window)
    assert single.model_dump(by_alias=True) == {
        "canteenId": 1,
        "slots": [
            {"date": "2099-01-05", "meal": "breakfast", "startTime": "08:00", "remainingCapacity": 1},
            {"date": "2099-01-05", "meal": "breakfast", "startTime": "08:30", "remainingCapacity": 4},
        ],
    }

    summary = await router.all_canteens_status(canteen_repo=canteen_repo, store=store, **window)
    assert [s.canteen_id for s in summary] == [1]
    assert summary[0].name == "Canteen 1"

    with pytest.raises(HTTPException) as missing:
        await router.canteen_status(canteen_id=2, canteen_repo=canteen_repo, store=store, **window)
    assert missing.value.status_code == 404

    with pytest.raises(HTTPException) as invalid:
        await router.canteen_status(canteen_id=1, canteen_repo=canteen_repo, store=store, **{**window, "duration": "90"})
    assert invalid.value.status_code == 400
