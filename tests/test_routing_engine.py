"""Tests for the routing decision engine."""

import pytest

from app.domain.models.classification import Priority
from app.domain.services.routing_engine import Recipient, acknowledgment_text, decide

from conftest import make_classification


class TestRoleForwarding:
    def test_renter_to_owner_forwards(self):
        decision = decide(make_classification(routeTo="owner"), "renter")

        assert decision.recipients == frozenset({Recipient.OWNER})
        assert decision.forward_to == frozenset({Recipient.OWNER})
        assert decision.notify_admins is False
        assert decision.shared_with_admin is False

    def test_owner_to_renter_forwards(self):
        decision = decide(make_classification(routeTo="renter"), "owner")

        assert decision.recipients == frozenset({Recipient.RENTER})

    @pytest.mark.parametrize("route, role", [("owner", "owner"), ("renter", "renter")])
    def test_same_role_target_is_noop(self, route, role):
        decision = decide(make_classification(routeTo=route), role)

        assert decision.recipients == frozenset()
        assert decision.notify_admins is False

    def test_both_from_renter(self):
        decision = decide(make_classification(routeTo="both"), "renter")

        assert decision.recipients == frozenset({Recipient.ADMIN, Recipient.OWNER})
        assert decision.shared_with_admin is True

    def test_both_from_owner(self):
        decision = decide(make_classification(routeTo="both"), "owner")

        assert decision.recipients == frozenset({Recipient.ADMIN, Recipient.RENTER})

    def test_admin_route(self):
        decision = decide(make_classification(routeTo="admin"), "owner")

        assert decision.recipients == frozenset({Recipient.ADMIN})
        assert decision.forward_to == frozenset()


class TestReplySelection:
    def test_substantive_answer_used_when_safe(self):
        decision = decide(make_classification(), "owner")

        assert decision.auto_reply_text == "La piscina abre a las 8am."
        assert decision.substantive_reply is True

    def test_human_review_uses_acknowledgment_and_adds_admin(self):
        decision = decide(make_classification(routeTo="owner", requiresHumanReview=True), "renter")

        assert Recipient.ADMIN in decision.recipients
        assert Recipient.OWNER in decision.recipients
        assert decision.requires_human_review is True
        assert decision.substantive_reply is False
        assert decision.auto_reply_text == acknowledgment_text("es", "general_question")

    def test_emergency_uses_acknowledgment_and_adds_admin(self):
        decision = decide(
            make_classification(intent="emergency", priority="emergency", routeTo="renter"), "renter"
        )

        assert decision.priority == Priority.EMERGENCY
        assert decision.recipients == frozenset({Recipient.ADMIN})
        assert decision.substantive_reply is False

    def test_empty_suggestion_falls_back_to_acknowledgment(self):
        decision = decide(make_classification(suggestedResponse=""), "owner", "en")

        assert decision.auto_reply_text == acknowledgment_text("en", "general_question")

    def test_maintenance_acknowledgment_wording(self):
        assert "solicitud de mantenimiento" in acknowledgment_text("es", "maintenance_request")
        assert "maintenance request" in acknowledgment_text("en", "maintenance_request")
        assert "mensaje" in acknowledgment_text("fr", "noise_complaint")

    def test_priority_passes_through(self):
        decision = decide(make_classification(priority="high"), "owner")

        assert decision.priority == Priority.HIGH


class TestPurity:
    def test_identical_inputs_identical_decisions(self):
        classification = make_classification(routeTo="both", priority="medium")

        assert decide(classification, "renter", "es") == decide(classification, "renter", "es")

    def test_decision_is_immutable(self):
        decision = decide(make_classification(), "owner")

        with pytest.raises(AttributeError):
            decision.priority = Priority.HIGH
