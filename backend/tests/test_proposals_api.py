"""Tests for the /api/proposals endpoints."""

from tests.conftest import make_perpetrator, session_headers


def _register(client, session_id):
    client.put(f"/api/sessions/{session_id}", json={"fingerprint": f"fp-{session_id}"})
    return session_headers(session_id)


def _record(client, headers):
    return client.post(
        "/api/records/perpetrators",
        json={"reason": "first report", "fields": make_perpetrator()},
        headers=headers,
    ).json()["id"]


def _propose(client, headers, record_id, changes, reason="news report"):
    return client.post(
        "/api/proposals",
        json={"target_collection": "perpetrators", "target_id": record_id,
              "proposed_changes": changes, "reason": reason},
        headers=headers,
    )


class TestProposalLifecycle:

    def test_propose_and_fetch(self, client):
        author = _register(client, "author")
        record_id = _record(client, author)

        resp = _propose(client, author, record_id, {"status": "arrested"})
        assert resp.status_code == 201
        proposal = resp.json()
        assert proposal["status"] == "pending"
        assert proposal["required_verifications"] == 3

        fetched = client.get(f"/api/proposals/{proposal['id']}")
        assert fetched.status_code == 200
        assert fetched.json()["proposed_changes"] == {"status": "arrested"}

    def test_verify_until_approved(self, client):
        author = _register(client, "author")
        record_id = _record(client, author)
        proposal_id = _propose(client, author, record_id, {"status": "arrested"}).json()["id"]

        results = [
            client.post(f"/api/proposals/{proposal_id}/verify", headers=_register(client, f"v{i}")).json()
            for i in range(3)
        ]
        assert [r["current_verifications"] for r in results] == [1, 2, 3]
        assert [r["status"] for r in results] == ["pending", "pending", "approved"]
        assert results[-1]["approved_version_id"]

    def test_duplicate_vote(self, client):
        author = _register(client, "author")
        record_id = _record(client, author)
        proposal_id = _propose(client, author, record_id, {"status": "arrested"}).json()["id"]
        voter = _register(client, "v1")

        client.post(f"/api/proposals/{proposal_id}/verify", headers=voter)
        resp = client.post(f"/api/proposals/{proposal_id}/verify", headers=voter)
        assert resp.status_code == 409
        assert resp.json()["error"] == "DUPLICATE_VERIFICATION"

    def test_conflicting_proposal(self, client):
        author = _register(client, "author")
        record_id = _record(client, author)
        _propose(client, author, record_id, {"status": "arrested"})

        resp = _propose(client, _register(client, "other"), record_id, {"status": "fled"})
        assert resp.status_code == 409
        assert resp.json()["error"] == "CONFLICT"
        assert resp.json()["details"]["fields"] == ["status"]

    def test_reject(self, client):
        author = _register(client, "author")
        record_id = _record(client, author)
        proposal_id = _propose(client, author, record_id, {"status": "arrested"}).json()["id"]

        critic = _register(client, "critic")
        resp = client.post(f"/api/proposals/{proposal_id}/reject", json={"reason": "no source"}, headers=critic)
        assert resp.status_code == 200
        assert resp.json()["status"] == "rejected"
        assert client.get("/api/sessions/critic").json()["trust_score"] == 48

        again = client.post(f"/api/proposals/{proposal_id}/verify", headers=critic)
        assert again.status_code == 409
        assert again.json()["error"] == "INVALID_STATE"

    def test_reject_requires_reason(self, client):
        author = _register(client, "author")
        record_id = _record(client, author)
        proposal_id = _propose(client, author, record_id, {"status": "arrested"}).json()["id"]
        resp = client.post(f"/api/proposals/{proposal_id}/reject", json={"reason": ""}, headers=author)
        assert resp.status_code == 422

    def test_invalid_changes(self, client):
        author = _register(client, "author")
        record_id = _record(client, author)
        resp = _propose(client, author, record_id, {"id": "hijack"})
        assert resp.status_code == 400

    def test_unknown_proposal(self, client):
        assert client.get("/api/proposals/nope").status_code == 404
        resp = client.post("/api/proposals/nope/verify", headers=_register(client, "v1"))
        assert resp.status_code == 404
        assert resp.json()["error"] == "PROPOSAL_NOT_FOUND"


class TestProposalListing:

    def test_list_pending_by_collection(self, client):
        author = _register(client, "author")
        record_id = _record(client, author)
        proposal_id = _propose(client, author, record_id, {"status": "arrested"}).json()["id"]

        resp = client.get("/api/proposals", params={"collection": "perpetrators"})
        assert resp.status_code == 200
        assert [p["id"] for p in resp.json()] == [proposal_id]
        assert client.get("/api/proposals", params={"collection": "victims"}).json() == []

    def test_list_requires_known_collection(self, client):
        assert client.get("/api/proposals", params={"collection": "actions"}).status_code == 422

    def test_list_pending_for_record(self, client):
        author = _register(client, "author")
        record_id = _record(client, author)
        proposal_id = _propose(client, author, record_id, {"rank": "General"}).json()["id"]

        resp = client.get(f"/api/proposals/target/perpetrators/{record_id}")
        assert resp.status_code == 200
        assert [p["id"] for p in resp.json()] == [proposal_id]
