"""Tests for the projections: map aggregation, totals, recent feed and audit reads."""

import pytest

from witness.core.location import extract_province, format_location, region_code
from witness.services import RecordService, analytics_service
from tests.conftest import make_incident, make_perpetrator, make_session, make_victim


class TestLocation:

    def test_format_location(self):
        assert format_location("Fars", "Shiraz") == "Fars - Shiraz"
        assert format_location("Fars", None) == "Fars"
        assert format_location(None, " Shiraz ") == "Shiraz"
        assert format_location(None, None) == ""

    def test_extract_province_is_case_insensitive(self):
        assert extract_province("protest in TEHRAN north") == "Tehran"
        assert extract_province("Nowhere") is None
        assert extract_province(None) is None

    def test_longest_name_wins(self):
        assert extract_province("Kermanshah - city centre") == "Kermanshah"
        assert extract_province("Kerman bazaar") == "Kerman"

    def test_region_code_prefers_province_field(self):
        assert region_code("Fars", "Tehran") == "IR-07"
        assert region_code(None, "Isfahan - square") == "IR-10"
        assert region_code(None, "unknown place") is None


@pytest.fixture()
def populated(db):
    actor = make_session(db, "author")
    records = RecordService(db)
    perp = records.create("perpetrators", make_perpetrator(), actor, "r", now=1000)
    victim = records.create("victims", make_victim(), actor, "r", now=2000)
    records.create("incidents", make_incident(perp.id, [victim.id]), actor, "r", now=3000)
    records.create("victims", make_victim(name="Arman Rahimi", incident_province=None,
                                          incident_location="somewhere unmapped"), actor, "r", now=4000)
    return actor


class TestProjections:

    def test_map_data(self, db, populated):
        data = analytics_service.map_data(db)
        assert data["IR-23"] == {"perpetrators": 1, "victims": 0, "incidents": 0}
        assert data["IR-10"] == {"perpetrators": 0, "victims": 1, "incidents": 1}
        assert set(data) == {"IR-23", "IR-10"}

    def test_total_stats(self, db, populated):
        assert analytics_service.total_stats(db) == {"perpetrators": 1, "victims": 2, "incidents": 1}

    def test_recent_feed_newest_first(self, db, populated):
        feed = analytics_service.recent_feed(db)
        assert [item["kind"] for item in feed] == ["victims", "incidents", "victims", "perpetrators"]
        incident = feed[1]
        assert incident["title"] == "killing"
        assert incident["subtitle"] == "Isfahan - central square · 2025-10-03"
        assert incident["status"] is None
        assert feed[-1]["subtitle"] == "IRGC · Tehran Unit 3"

    def test_recent_feed_limit_clamped(self, db, populated):
        assert len(analytics_service.recent_feed(db, 2)) == 2
        assert len(analytics_service.recent_feed(db, 0)) == 1
        assert len(analytics_service.recent_feed(db, 500)) == 4


class TestProjectionEndpoints:

    def test_map_endpoint(self, client, populated):
        resp = client.get("/api/analytics/map")
        assert resp.status_code == 200
        assert resp.json()["IR-10"]["victims"] == 1

    def test_totals_endpoint(self, client, populated):
        assert client.get("/api/analytics/totals").json() == {"perpetrators": 1, "victims": 2, "incidents": 1}

    def test_recent_endpoint(self, client, populated):
        resp = client.get("/api/recent", params={"limit": 3})
        assert resp.status_code == 200
        assert len(resp.json()) == 3


class TestAuditEndpoint:

    def test_entries_by_session(self, client, populated):
        resp = client.get("/api/audit", params={"session_id": "author"})
        assert resp.status_code == 200
        entries = resp.json()
        assert len(entries) == 4
        assert {e["action"] for e in entries} == {"create"}
        assert entries[0]["timestamp"] >= entries[-1]["timestamp"]
        assert isinstance(entries[0]["changes"], dict)
        assert "ip_hash" not in entries[0]

    def test_entries_by_document(self, client, db, populated):
        record_id = client.get("/api/records/perpetrators").json()["items"][0]["id"]
        entries = client.get("/api/audit", params={"document_id": record_id}).json()
        assert len(entries) == 1
        assert entries[0]["changes"]["name"] == "Reza Farhadi"


class TestSeeder:

    def test_seeds_empty_database_once(self, db):
        from witness.core.seeder import seed_demo_records

        assert seed_demo_records(db) == 6
        assert analytics_service.total_stats(db) == {"perpetrators": 2, "victims": 2, "incidents": 2}
        assert seed_demo_records(db) == 0

    def test_seed_references_resolved(self, db):
        from witness.core.seeder import seed_demo_records
        from witness.models import Incident, Perpetrator

        seed_demo_records(db)
        perp_ids = {p.id for p in db.query(Perpetrator).all()}
        for incident in db.query(Incident).all():
            assert incident.perpetrator_id in perp_ids
