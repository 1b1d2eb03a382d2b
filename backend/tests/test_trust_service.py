"""Tests for the trust ledger and quorum sizing."""

from witness.models import ContributorSession
from witness.services.trust_service import TrustLedger, required_verifications_for_trust
from tests.conftest import make_session


class TestQuorumSizing:

    def test_tiers(self):
        assert required_verifications_for_trust(100) == 2
        assert required_verifications_for_trust(90) == 2
        assert required_verifications_for_trust(80) == 2
        assert required_verifications_for_trust(79) == 3
        assert required_verifications_for_trust(50) == 3
        assert required_verifications_for_trust(49) == 4
        assert required_verifications_for_trust(40) == 4
        assert required_verifications_for_trust(0) == 4

    def test_unknown_session_gets_three(self):
        assert required_verifications_for_trust(None) == 3

    def test_ledger_reads_session_score(self, db):
        make_session(db, "high", trust_score=90)
        make_session(db, "low", trust_score=40)
        ledger = TrustLedger(db)
        assert ledger.required_verifications("high") == 2
        assert ledger.required_verifications("low") == 4
        assert ledger.required_verifications("nobody") == 3


class TestAdjust:

    def test_clamps_at_upper_bound(self, db):
        make_session(db, "s1", trust_score=99)
        ledger = TrustLedger(db)
        for _ in range(5):
            ledger.adjust("s1", 1)
        db.commit()
        assert db.get(ContributorSession, "s1").trust_score == 100

    def test_clamps_at_lower_bound(self, db):
        make_session(db, "s1", trust_score=3)
        ledger = TrustLedger(db)
        for _ in range(10):
            ledger.adjust("s1", -2)
        db.commit()
        assert db.get(ContributorSession, "s1").trust_score == 0

    def test_large_deltas_stay_in_range(self, db):
        make_session(db, "s1")
        ledger = TrustLedger(db)
        assert ledger.adjust("s1", 1000) == 100
        assert ledger.adjust("s1", -1000) == 0

    def test_missing_session_is_noop(self, db):
        assert TrustLedger(db).adjust("ghost", 5) is None


class TestRecordVerification:

    def test_increments_lifetime_counter(self, db):
        make_session(db, "s1")
        ledger = TrustLedger(db)
        ledger.record_verification("s1")
        ledger.record_verification("s1")
        db.commit()
        assert db.get(ContributorSession, "s1").verification_count == 2

    def test_missing_session_is_noop(self, db):
        TrustLedger(db).record_verification("ghost")
