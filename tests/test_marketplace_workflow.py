"""Tests for session requests, confirmation and operator applications."""

from datetime import date, datetime, timezone

import pytest

from dst_booking.context import WorkflowContext
from dst_booking.domain.marketplace.schemas import SessionRequestCreate
from dst_booking.domain.marketplace.workflow import MarketplaceWorkflow
from dst_booking.domain.sessions.repository import ApplicationRepository
from dst_booking.domain.sessions.schemas import OperatorRequirement
from dst_booking.models import SessionOperator, ShootingSession


def _request(**overrides) -> SessionRequestCreate:
    data = {
        "clientId": "c1",
        "date": "2025-06-12",
        "setupIds": ["s1", "s2"],
        "regionId": "idf",
    }
    data.update(overrides)
    return SessionRequestCreate(**data)


class TestCreateSessionRequest:
    """Test client session requests."""

    def test_request_is_pending_and_hidden(self, db, ctx):
        result = MarketplaceWorkflow(ctx).create_session_request(_request())

        assert result["success"] is True
        session = result["session"]
        assert session["status"] == "pending_confirmation"
        assert session["marketplaceVisible"] is False
        assert session["date"] == "2025-06-12"
        assert session["setupIds"] == ["s1", "s2"]
        assert session["operatorRequirement"] == {"minOperators": 1, "preferredOperators": 1}
        assert db.get(ShootingSession, session["id"]) is not None

    def test_setup_ids_are_cleaned(self, ctx):
        result = MarketplaceWorkflow(ctx).create_session_request(
            _request(setupIds=[" s1 ", "", "s1", "s2"])
        )
        assert result["session"]["setupIds"] == ["s1", "s2"]

    def test_operator_requirement_is_kept(self, ctx):
        requirement = OperatorRequirement(minOperators=2, preferredOperators=4)
        result = MarketplaceWorkflow(ctx).create_session_request(
            _request(operatorRequirement=requirement)
        )
        assert result["session"]["operatorRequirement"] == {
            "minOperators": 2,
            "preferredOperators": 4,
        }

    def test_notes_are_escaped(self, ctx):
        result = MarketplaceWorkflow(ctx).create_session_request(
            _request(notes="<b>studio</b>")
        )
        assert result["session"]["notes"] == "&lt;b&gt;studio&lt;/b&gt;"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"clientId": None},
            {"clientId": ""},
            {"clientId": "   "},
            {"date": None},
            {"setupIds": []},
            {"setupIds": ["  "]},
            {"date": "12/06/2025"},
            {"date": "2025-06-12garbage"},
            {"date": "2025-06-12 junk"},
            {"operatorRequirement": OperatorRequirement(minOperators=-1)},
        ],
    )
    def test_invalid_data(self, db, ctx, overrides):
        result = MarketplaceWorkflow(ctx).create_session_request(_request(**overrides))

        assert result["success"] is False
        assert result["error"] == "INVALID_DATA"
        assert db.query(ShootingSession).count() == 0

    def test_client_id_is_stripped(self, ctx):
        result = MarketplaceWorkflow(ctx).create_session_request(_request(clientId="  c1 "))
        assert result["session"]["clientId"] == "c1"

    def test_datetime_string_is_read_as_its_date(self, ctx):
        result = MarketplaceWorkflow(ctx).create_session_request(
            _request(date="2025-06-12T14:30:00")
        )
        assert result["session"]["date"] == "2025-06-12"

    def test_unknown_offer(self, ctx):
        result = MarketplaceWorkflow(ctx).create_session_request(_request(offerId="nope"))
        assert result["error"] == "OFFER_NOT_FOUND"

    def test_known_offer_is_linked(self, ctx, make_offer):
        offer = make_offer()
        result = MarketplaceWorkflow(ctx).create_session_request(_request(offerId=offer.id))
        assert result["session"]["offerId"] == offer.id


class TestConfirmSession:
    """Test enterprise confirmation."""

    def test_confirmation_publishes_session(self, db, ctx, make_session):
        session = make_session(status="pending_confirmation", marketplace_visible=False)

        result = MarketplaceWorkflow(ctx).enterprise_confirm_session(session.id)

        assert result["success"] is True
        assert result["session"]["status"] == "confirmed"
        assert result["session"]["marketplaceVisible"] is True

    @pytest.mark.parametrize("status", ["confirmed", "terminee", "cancelled"])
    def test_only_pending_sessions_can_be_confirmed(self, db, ctx, make_session, status):
        session = make_session(status=status, marketplace_visible=False)

        result = MarketplaceWorkflow(ctx).enterprise_confirm_session(session.id)

        assert result["error"] == "INVALID_STATUS"
        db.expire_all()
        assert db.get(ShootingSession, session.id).marketplace_visible is False

    def test_unknown_session(self, ctx):
        result = MarketplaceWorkflow(ctx).enterprise_confirm_session("missing")
        assert result["error"] == "SESSION_NOT_FOUND"


class TestMarketplaceListing:
    """Test the operator-facing listing."""

    def test_only_confirmed_visible_sessions_are_listed(self, ctx, make_session):
        listed = make_session()
        make_session(status="pending_confirmation", marketplace_visible=False)
        make_session(status="terminee")
        make_session(status="confirmed", marketplace_visible=False)

        result = MarketplaceWorkflow(ctx).get_marketplace_sessions()

        assert result["count"] == 1
        assert [s["id"] for s in result["sessions"]] == [listed.id]

    def test_ordered_by_date_ascending(self, ctx, make_session):
        late = make_session(date=date(2025, 7, 1))
        early = make_session(date=date(2025, 5, 1))
        middle = make_session(date=date(2025, 6, 1))

        result = MarketplaceWorkflow(ctx).get_marketplace_sessions()

        assert [s["id"] for s in result["sessions"]] == [early.id, middle.id, late.id]

    def test_date_and_region_filters(self, ctx, make_session):
        make_session(date=date(2025, 5, 1), region_id="idf")
        kept = make_session(date=date(2025, 6, 1), region_id="idf")
        make_session(date=date(2025, 6, 1), region_id="paca")

        result = MarketplaceWorkflow(ctx).get_marketplace_sessions(
            date_from=date(2025, 5, 15), region_id="idf"
        )

        assert [s["id"] for s in result["sessions"]] == [kept.id]

    def test_session_without_setup_is_not_listed(self, ctx, make_session):
        make_session(setup_ids=[])
        result = MarketplaceWorkflow(ctx).get_marketplace_sessions()
        assert result["count"] == 0

    def test_limit(self, ctx, make_session):
        for day in range(1, 6):
            make_session(date=date(2025, 5, day))

        result = MarketplaceWorkflow(ctx).get_marketplace_sessions(limit=2)

        assert result["count"] == 2
        assert [s["date"] for s in result["sessions"]] == ["2025-05-01", "2025-05-02"]

    def test_limit_must_be_positive(self, ctx):
        result = MarketplaceWorkflow(ctx).get_marketplace_sessions(limit=0)
        assert result["error"] == "INVALID_DATA"

    def test_empty_marketplace(self, ctx):
        result = MarketplaceWorkflow(ctx).get_marketplace_sessions()
        assert result["success"] is True
        assert result["sessions"] == []


class TestApplications:
    """Test operator applications and enterprise decisions."""

    def test_apply_creates_pending_application(self, db, ctx, make_session):
        session = make_session()

        result = MarketplaceWorkflow(ctx).apply_to_session(session.id, "op-a")

        assert result["success"] is True
        application = result["application"]
        assert application["status"] == "pending"
        assert application["operatorId"] == "op-a"
        assert application["appliedAt"].startswith("2025-04-01T09:30:00")
        assert db.query(SessionOperator).count() == 1

    def test_second_application_is_rejected(self, db, ctx, make_session):
        session = make_session()
        workflow = MarketplaceWorkflow(ctx)

        workflow.apply_to_session(session.id, "op-a")
        result = workflow.apply_to_session(session.id, "op-a")

        assert result["error"] == "ALREADY_APPLIED"
        assert db.query(SessionOperator).count() == 1

    def test_concurrent_duplicate_is_caught_by_constraint(self, db, make_session, make_application):
        class BlindApplications(ApplicationRepository):
            @staticmethod
            def get(db, session_id, operator_id):
                return None

        session = make_session()
        make_application(session, "op-a")
        ctx = WorkflowContext(db=db, applications=BlindApplications)

        result = MarketplaceWorkflow(ctx).apply_to_session(session.id, "op-a")

        assert result["error"] == "ALREADY_APPLIED"
        assert db.query(SessionOperator).count() == 1

    @pytest.mark.parametrize(
        "overrides",
        [
            {"status": "pending_confirmation", "marketplace_visible": False},
            {"status": "confirmed", "marketplace_visible": False},
            {"status": "terminee"},
            {"status": "confirmed", "marketplace_visible": True, "setup_ids": []},
        ],
    )
    def test_apply_to_unavailable_session(self, ctx, make_session, overrides):
        session = make_session(**overrides)
        result = MarketplaceWorkflow(ctx).apply_to_session(session.id, "op-a")
        assert result["error"] == "SESSION_NOT_AVAILABLE"

    def test_apply_to_unknown_session(self, ctx):
        result = MarketplaceWorkflow(ctx).apply_to_session("missing", "op-a")
        assert result["error"] == "SESSION_NOT_FOUND"

    def test_accept_operator(self, db, ctx, make_session, make_application):
        session = make_session()
        make_application(session, "op-a")
        other = make_application(session, "op-b")

        result = MarketplaceWorkflow(ctx).accept_operator(session.id, "op-a")

        assert result["success"] is True
        assert result["application"]["status"] == "accepted"
        assert result["application"]["acceptedAt"] is not None
        db.expire_all()
        assert db.get(SessionOperator, other.id).status == "pending"
        assert db.get(ShootingSession, session.id).status == "confirmed"

    def test_reject_operator_with_reason(self, ctx, make_session, make_application):
        session = make_session()
        make_application(session, "op-a")

        result = MarketplaceWorkflow(ctx).reject_operator(session.id, "op-a", "Fully booked")

        assert result["application"]["status"] == "rejected"
        assert result["application"]["rejectionReason"] == "Fully booked"
        assert result["application"]["rejectedAt"] is not None

    def test_decision_on_missing_application(self, ctx, make_session):
        session = make_session()
        result = MarketplaceWorkflow(ctx).accept_operator(session.id, "op-a")
        assert result["error"] == "APPLICATION_NOT_FOUND"

    @pytest.mark.parametrize("decided", ["accepted", "rejected"])
    @pytest.mark.parametrize("decision", ["accept", "reject"])
    def test_decision_is_final(self, db, ctx, make_session, make_application, decided, decision):
        session = make_session()
        decided_at = datetime(2025, 3, 1, tzinfo=timezone.utc)
        stamps = (
            {"accepted_at": decided_at}
            if decided == "accepted"
            else {"rejected_at": decided_at, "rejection_reason": "Too far"}
        )
        application = make_application(session, "op-a", status=decided, **stamps)
        before = (
            application.status,
            application.accepted_at,
            application.rejected_at,
            application.rejection_reason,
        )
        workflow = MarketplaceWorkflow(ctx)

        if decision == "accept":
            result = workflow.accept_operator(session.id, "op-a")
        else:
            result = workflow.reject_operator(session.id, "op-a", "Changed my mind")

        assert result["error"] == "INVALID_STATUS"
        assert result["details"] == f"Application status is {decided}, not pending"
        db.expire_all()
        stored = db.get(SessionOperator, application.id)
        assert (
            stored.status,
            stored.accepted_at,
            stored.rejected_at,
            stored.rejection_reason,
        ) == before

    def test_accepted_operator_cannot_be_accepted_again(
        self, db, ctx, make_session, make_application
    ):
        session = make_session()
        make_application(session, "op-a")
        make_application(session, "op-b")
        workflow = MarketplaceWorkflow(ctx)

        assert workflow.accept_operator(session.id, "op-a")["success"] is True
        assert workflow.reject_operator(session.id, "op-b")["success"] is True
        again = workflow.accept_operator(session.id, "op-a")

        assert again["error"] == "INVALID_STATUS"
        db.expire_all()
        statuses = {
            a.operator_id: a.status for a in ctx.applications.list_for_session(db, session.id)
        }
        assert statuses == {"op-a": "accepted", "op-b": "rejected"}

    def test_pending_applications(self, ctx, make_session, make_application):
        session = make_session()
        make_application(session, "op-a", applied_at=datetime(2025, 4, 2, tzinfo=timezone.utc))
        make_application(session, "op-b", applied_at=datetime(2025, 4, 1, tzinfo=timezone.utc))
        make_application(session, "op-c", status="accepted")

        result = MarketplaceWorkflow(ctx).get_pending_applications(session.id)

        assert result["count"] == 2
        assert [a["operatorId"] for a in result["applications"]] == ["op-b", "op-a"]

    def test_operator_applications_summary(self, ctx, make_session, make_application):
        first, second, third = make_session(), make_session(), make_session()
        make_application(first, "op-a")
        make_application(second, "op-a", status="accepted")
        make_application(third, "op-a", status="rejected")
        make_application(third, "op-b")

        result = MarketplaceWorkflow(ctx).get_operator_applications("op-a")

        assert result["count"] == 3
        assert result["summary"] == {"total": 3, "pending": 1, "accepted": 1, "rejected": 1}
