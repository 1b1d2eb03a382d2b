"""Tests for the /api/sessions endpoints and the bootstrap gate behind them."""


class TestSessionRegistry:

    def test_register_new_session(self, client):
        resp = client.put("/api/sessions/s1", json={"fingerprint": "fp-1"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["session_id"] == "s1"
        assert data["trust_score"] == 50
        assert data["contribution_count"] == 0
        assert data["verification_count"] == 0
        assert "ip_hash" not in data

    def test_upsert_refreshes_existing(self, client, db):
        from witness.models import ContributorSession

        client.put("/api/sessions/s1", json={"fingerprint": "fp-1"})
        first_seen = client.get("/api/sessions/s1").json()["first_seen"]

        client.put("/api/sessions/s1", json={"fingerprint": "fp-2"})
        data = client.get("/api/sessions/s1").json()
        assert data["first_seen"] == first_seen
        assert data["last_seen"] >= first_seen
        db.expire_all()
        assert db.get(ContributorSession, "s1").fingerprint == "fp-2"

    def test_ip_hash_stored_not_address(self, client, db):
        from witness.models import ContributorSession

        client.put("/api/sessions/s1", json={"fingerprint": "fp-1"}, headers={"X-Forwarded-For": "203.0.113.7"})
        stored = db.get(ContributorSession, "s1").ip_hash
        assert stored != "203.0.113.7"
        assert len(stored) == 32

    def test_blank_fingerprint_rejected(self, client):
        assert client.put("/api/sessions/s1", json={"fingerprint": "  "}).status_code == 422

    def test_get_unknown_session(self, client):
        resp = client.get("/api/sessions/ghost")
        assert resp.status_code == 404
        assert resp.json()["error"] == "SESSION_NOT_FOUND"


class TestContributionGate:

    def test_can_contribute_for_unknown_session(self, client):
        resp = client.get("/api/sessions/ghost/can-contribute")
        assert resp.json() == {"allowed": True, "remaining": 10}

    def test_ten_contributions_then_refused(self, client):
        client.put("/api/sessions/s1", json={"fingerprint": "fp-1"})

        for i in range(10):
            resp = client.post("/api/sessions/s1/contributions")
            assert resp.status_code == 200
            assert resp.json()["contribution_count"] == i + 1

        assert client.get("/api/sessions/s1/can-contribute").json() == {"allowed": False, "remaining": 0}
        resp = client.post("/api/sessions/s1/contributions")
        assert resp.status_code == 429
        assert client.get("/api/sessions/s1").json()["contribution_count"] == 10

    def test_can_contribute_does_not_count(self, client):
        client.put("/api/sessions/s1", json={"fingerprint": "fp-1"})
        for _ in range(3):
            client.get("/api/sessions/s1/can-contribute")
        assert client.get("/api/sessions/s1").json()["contribution_count"] == 0

    def test_contribution_requires_session(self, client):
        assert client.post("/api/sessions/ghost/contributions").status_code == 404

    def test_reregistering_restarts_the_window(self, db):
        from witness.core.clock import ONE_HOUR_MS
        from witness.services import SessionService

        service = SessionService(db)
        t0 = 1_700_000_000_000
        service.upsert("s1", "fp-1", "hash-s1", now=t0)
        for _ in range(10):
            service.record_contribution("s1", now=t0)

        # Capped two hours ago; a refresh now keeps the count and moves last_seen.
        refreshed = service.upsert("s1", "fp-1", "hash-s1", now=t0 + 2 * ONE_HOUR_MS)
        assert refreshed.contribution_count == 10
        assert service.can_contribute("s1", now=t0 + 2 * ONE_HOUR_MS + 1) == {"allowed": False, "remaining": 0}
        assert service.can_contribute("s1", now=t0 + 3 * ONE_HOUR_MS + 1)["allowed"] is True
