"""
Donation-request lifecycle: creation guard, status transitions, owner scoping
and role-gated listing.
"""
import asyncio

import pytest
from fastapi.testclient import TestClient

from errors import Forbidden, InvalidArgument, InvalidTransition, NotFound
from stores import DonationRequestStore, UserStore

from tests.conftest import login

DETAILS = {
    "requesterName": "Donor",
    "recipientName": "Patient",
    "recipientDistrict": "47",
    "recipientUpazila": "Savar",
    "hospitalName": "Dhaka Medical College Hospital",
    "bloodGroup": "O+",
    "donationDate": "2026-11-02",
    "donationTime": "10:30",
}


@pytest.fixture(name="store")
def store_fixture(db):
    return DonationRequestStore(db["donationRequests"], UserStore(db["users"]))


def create_request(client: TestClient, **extra) -> str:
    r = client.post("/create-donation-request", json={**DETAILS, **extra})
    assert r.status_code == 200, r.text
    return r.json()["insertedId"]


def set_status(db, request_id: str, status: str):
    for document in db["donationRequests"].documents:
        if str(document["_id"]) == request_id:
            document["donationStatus"] = status


def test_created_request_is_pending_and_transition_from_pending_is_noop(client: TestClient, db, seed_user):
    seed_user("donor@x.com")
    request_id = create_request(client, requesterEmail="donor@x.com", donationStatus="done", status="done")

    stored = db["donationRequests"].documents[0]
    assert stored["donationStatus"] == "pending"
    assert "status" not in stored
    assert stored["requesterEmail"] == "donor@x.com"

    login(client, "donor@x.com")
    r = client.put(f"/requests/{request_id}/status", json={"status": "done"})
    assert r.status_code == 200
    assert r.json() == {"success": False}
    assert stored["donationStatus"] == "pending"


def test_blocked_requester_is_forbidden(client: TestClient, seed_user):
    seed_user("donor@x.com", status="blocked")

    r = client.post("/create-donation-request", json={**DETAILS, "requesterEmail": "donor@x.com"})
    assert r.status_code == 403
    assert r.json() == {"message": "Access denied. You are blocked."}


def test_unknown_requester_is_forbidden(store: DonationRequestStore):
    with pytest.raises(Forbidden):
        asyncio.run(store.create("ghost@x.com", DETAILS))
    with pytest.raises(Forbidden):
        asyncio.run(store.create(None, DETAILS))


def test_cookie_identity_is_the_requester(client: TestClient, db, seed_user):
    seed_user("donor@x.com")
    login(client, "donor@x.com")

    create_request(client)
    assert db["donationRequests"].documents[0]["requesterEmail"] == "donor@x.com"

    r = client.post("/create-donation-request", json={**DETAILS, "requesterEmail": "someone@x.com"})
    assert r.status_code == 403
    assert r.json() == {"message": "requesterEmail must match the signed-in user"}


@pytest.mark.parametrize("final", ["done", "canceled"])
def test_inprogress_request_can_be_finished_once(client: TestClient, db, seed_user, final):
    seed_user("donor@x.com")
    login(client, "donor@x.com")
    request_id = create_request(client)
    set_status(db, request_id, "inprogress")

    first = client.put(f"/requests/{request_id}/status", json={"status": final})
    second = client.put(f"/requests/{request_id}/status", json={"status": "done"})

    assert first.json() == {"success": True}
    assert second.json() == {"success": False}
    assert db["donationRequests"].documents[0]["donationStatus"] == final


def test_concurrent_duplicate_transition_has_single_winner(db, seed_user, store: DonationRequestStore):
    seed_user("donor@x.com")
    result = asyncio.run(store.create("donor@x.com", DETAILS))
    request_id = str(result.inserted_id)
    set_status(db, request_id, "inprogress")
    db["donationRequests"].interleave = True

    async def race():
        return await asyncio.gather(
            store.transition_status(request_id, "done"),
            store.transition_status(request_id, "canceled"),
        )

    outcomes = asyncio.run(race())
    assert sorted(outcomes) == [False, True]


def test_transition_rejects_non_final_status(client: TestClient, seed_user):
    seed_user("donor@x.com")
    login(client, "donor@x.com")
    request_id = create_request(client)

    r = client.put(f"/requests/{request_id}/status", json={"status": "inprogress"})
    assert r.status_code == 400
    assert r.json() == {"message": "Invalid status update"}


def test_owner_listing_is_scoped_and_filtered(client: TestClient, db, seed_user):
    seed_user("donor@x.com")
    seed_user("other@x.com")
    first = create_request(client, requesterEmail="donor@x.com")
    second = create_request(client, requesterEmail="donor@x.com")
    create_request(client, requesterEmail="other@x.com")
    set_status(db, second, "inprogress")

    login(client, "donor@x.com")
    mine = client.get("/donation-requests").json()
    assert [r["_id"] for r in mine] == [second, first]
    assert all(r["requesterEmail"] == "donor@x.com" for r in mine)

    pending = client.get("/donation-requests", params={"status": "pending"}).json()
    assert [r["_id"] for r in pending] == [first]

    # Un filtre inconnu est ignoré
    unknown = client.get("/donation-requests", params={"status": "whatever"}).json()
    assert len(unknown) == 2


def test_recent_requests_are_capped_at_three(client: TestClient, seed_user):
    seed_user("donor@x.com")
    login(client, "donor@x.com")
    ids = [create_request(client) for _ in range(5)]

    recent = client.get("/requests/recent").json()
    assert [r["_id"] for r in recent] == list(reversed(ids))[:3]


def test_all_requests_forbidden_for_donor(client: TestClient, seed_user):
    seed_user("donor@x.com")
    login(client, "donor@x.com")
    create_request(client)

    r = client.get("/all-donation-requests")
    assert r.status_code == 403


def test_all_requests_for_volunteer(client: TestClient, db, seed_user):
    seed_user("a@x.com")
    seed_user("b@x.com")
    seed_user("vol@x.com", role="volunteer")
    create_request(client, requesterEmail="a@x.com")
    done_id = create_request(client, requesterEmail="b@x.com")
    set_status(db, done_id, "done")

    login(client, "vol@x.com")
    assert len(client.get("/all-donation-requests").json()) == 2
    done = client.get("/all-donation-requests", params={"status": "done"}).json()
    assert [r["_id"] for r in done] == [done_id]


def test_list_all_store_guard(store: DonationRequestStore):
    with pytest.raises(Forbidden):
        asyncio.run(store.list_all({"role": "donor"}))
    assert asyncio.run(store.list_all({"role": "admin"})) == []


def test_get_by_id(client: TestClient, seed_user):
    seed_user("donor@x.com")
    login(client, "donor@x.com")
    request_id = create_request(client)

    r = client.get(f"/donation-requests/{request_id}")
    assert r.status_code == 200
    assert r.json()["hospitalName"] == DETAILS["hospitalName"]

    r = client.get("/donation-requests/64b7f0c2a1b2c3d4e5f60718")
    assert r.status_code == 404
    assert r.json() == {"message": "Not found"}

    assert client.get("/donation-requests/not-an-id").status_code == 400


def test_update_fields_and_donate_flow(client: TestClient, db, seed_user):
    seed_user("donor@x.com")
    seed_user("helper@x.com")
    request_id = create_request(client, requesterEmail="donor@x.com")

    # Un autre utilisateur accepte de donner : pending -> inprogress
    login(client, "helper@x.com")
    r = client.put(
        f"/donation-requests/{request_id}",
        json={"donorName": "Helper", "donorEmail": "helper@x.com", "donationStatus": "inprogress"},
    )
    assert r.status_code == 200
    assert r.json()["modifiedCount"] == 1

    stored = db["donationRequests"].documents[0]
    assert stored["donationStatus"] == "inprogress"
    assert stored["donorEmail"] == "helper@x.com"


def test_update_cannot_leave_terminal_status(client: TestClient, db, seed_user):
    seed_user("donor@x.com")
    login(client, "donor@x.com")
    request_id = create_request(client)
    set_status(db, request_id, "done")

    r = client.put(f"/donation-requests/{request_id}", json={"donationStatus": "pending"})
    assert r.status_code == 400
    assert db["donationRequests"].documents[0]["donationStatus"] == "done"

    r = client.put(f"/donation-requests/{request_id}", json={"hospitalName": "Other"})
    assert r.status_code == 200


def test_update_store_errors(store: DonationRequestStore, seed_user):
    seed_user("donor@x.com")
    request_id = str(asyncio.run(store.create("donor@x.com", DETAILS)).inserted_id)

    with pytest.raises(InvalidTransition):
        asyncio.run(store.update(request_id, {"donationStatus": "done"}))
    with pytest.raises(InvalidArgument):
        asyncio.run(store.update(request_id, {"donationStatus": "lost"}))
    with pytest.raises(NotFound):
        asyncio.run(store.update("64b7f0c2a1b2c3d4e5f60718", {"hospitalName": "X"}))


def test_delete_owner_or_admin(client: TestClient, seed_user):
    seed_user("donor@x.com")
    seed_user("other@x.com")
    seed_user("admin@x.com", role="admin")
    first = create_request(client, requesterEmail="donor@x.com")
    second = create_request(client, requesterEmail="donor@x.com")

    login(client, "other@x.com")
    assert client.delete(f"/donation-requests/{first}").status_code == 403

    login(client, "donor@x.com")
    r = client.delete(f"/donation-requests/{first}")
    assert r.status_code == 200
    assert r.json() == {"acknowledged": True, "deletedCount": 1}
    assert client.delete(f"/donation-requests/{first}").status_code == 404

    login(client, "admin@x.com")
    assert client.delete(f"/donation-requests/{second}").status_code == 200


def test_staff_status_route_is_role_gated(client: TestClient, db, seed_user):
    seed_user("donor@x.com")
    seed_user("vol@x.com", role="volunteer")
    login(client, "donor@x.com")
    request_id = create_request(client)
    set_status(db, request_id, "inprogress")

    r = client.put(f"/donation-requests/{request_id}/status", json={"status": "done"})
    assert r.status_code == 403

    login(client, "vol@x.com")
    r = client.put(f"/donation-requests/{request_id}/status", json={"status": "canceled"})
    assert r.json() == {"success": True}
    assert db["donationRequests"].documents[0]["donationStatus"] == "canceled"


def test_store_failure_is_generic_500(client: TestClient, db, seed_user):
    seed_user("donor@x.com")
    login(client, "donor@x.com")
    db["donationRequests"].fail = True

    r = client.get("/donation-requests")
    assert r.status_code == 500
    assert r.json() == {"message": "Failed to fetch donation requests"}


def test_update_cannot_null_the_status(client: TestClient, db, seed_user):
    seed_user("donor@x.com")
    login(client, "donor@x.com")
    request_id = create_request(client)
    set_status(db, request_id, "done")

    r = client.put(f"/donation-requests/{request_id}", json={"donationStatus": None})
    assert r.status_code == 400
    assert r.json() == {"message": "Invalid status"}
    assert db["donationRequests"].documents[0]["donationStatus"] == "done"


def test_concurrent_donate_updates_have_single_winner(db, seed_user, store: DonationRequestStore):
    seed_user("donor@x.com")
    request_id = str(asyncio.run(store.create("donor@x.com", DETAILS)).inserted_id)
    db["donationRequests"].interleave = True

    async def race():
        return await asyncio.gather(
            store.update(request_id, {"donationStatus": "inprogress", "donorEmail": "a@x.com"}),
            store.update(request_id, {"donationStatus": "inprogress", "donorEmail": "b@x.com"}),
            return_exceptions=True,
        )

    outcomes = asyncio.run(race())

    assert sum(1 for o in outcomes if isinstance(o, InvalidTransition)) == 1
    stored = db["donationRequests"].documents[0]
    assert stored["donationStatus"] == "inprogress"
    assert stored["donorEmail"] == "a@x.com"
