"""
Tests for OrderService and PaymentService.

Tests verify:
- Each mutation publishes exactly one event, after its write commits
- A failed commit raises and publishes nothing
- A failed publish never fails the committed mutation
- Status transitions and payment state are validated
"""

from datetime import timedelta
from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from rest_api.services.domain import OrderService, PaymentService
from rest_api.services.events import OrderEventPublisher
from shared.infrastructure.events import (
    OrderCancelledEvent,
    OrderEtaUpdatedEvent,
    OrderPaidEvent,
    OrderUpdatedEvent,
    PublisherRegistry,
)
from shared.utils.eta import ensure_aware
from shared.utils.exceptions import (
    DatabaseError,
    InvalidTransitionError,
    MinimumOrderError,
    OrderNotFoundError,
    PaymentStateError,
    ValidationError,
)
from shared.utils.schemas import CheckoutRequest
from tests.conftest import RecordingSink


@pytest.fixture
def mock_registry():
    registry = MagicMock(spec=PublisherRegistry)
    registry.publish.return_value = 1
    return registry


@pytest.fixture
def order_service(db_session, mock_registry):
    return OrderService(db_session, OrderEventPublisher(mock_registry))


@pytest.fixture
def payment_service(db_session, mock_registry):
    return PaymentService(db_session, OrderEventPublisher(mock_registry))


def published(mock_registry) -> list:
    return [c.args[0] for c in mock_registry.publish.call_args_list]


class TestStatusChanges:
    """update_status() follows the kitchen workflow."""

    def test_accept_publishes_order_updated(self, order_service, mock_registry, make_order):
        order = make_order(status="new")

        updated = order_service.update_status(order.id, "preparing")

        assert updated.status == "preparing"
        events = published(mock_registry)
        assert len(events) == 1
        assert isinstance(events[0], OrderUpdatedEvent)
        assert events[0].order.id == order.id
        assert events[0].order.status == "preparing"

    @pytest.mark.parametrize(
        "current,target",
        [
            ("new", "prepared"),
            ("new", "completed"),
            ("preparing", "new"),
            ("prepared", "preparing"),
            ("completed", "preparing"),
            ("cancelled", "preparing"),
        ],
    )
    def test_invalid_transition_rejected(self, order_service, mock_registry, make_order, current, target):
        order = make_order(status=current)

        with pytest.raises(InvalidTransitionError) as exc:
            order_service.update_status(order.id, target)

        assert exc.value.status_code == 400
        mock_registry.publish.assert_not_called()

    def test_reject_clears_payment(self, order_service, make_order):
        order = make_order(status="paid", paid_by="card", payment_method="card")

        updated = order_service.update_status(order.id, "cancelled")

        assert updated.status == "cancelled"
        assert updated.paid_by is None

    def test_unknown_order(self, order_service, mock_registry):
        with pytest.raises(OrderNotFoundError):
            order_service.update_status(999999, "preparing")
        mock_registry.publish.assert_not_called()


class TestAdjustEta:
    """adjust_eta() moves the ready time and publishes order_eta_updated."""

    def test_without_explicit_eta_uses_item_estimate(self, order_service, mock_registry, make_order):
        order = make_order(items=[("Burger", 2, 6.5)])
        created_at = ensure_aware(order.created_at)

        updated = order_service.adjust_eta(order.id, 10)

        # 5 + 8 * 2 = 21 minutes, plus 10
        assert ensure_aware(updated.estimated_ready_at) == created_at + timedelta(minutes=31)
        event = published(mock_registry)[0]
        assert isinstance(event, OrderEtaUpdatedEvent)
        assert event.order_id == order.id
        assert event.estimated_ready_at == created_at + timedelta(minutes=31)

    def test_explicit_eta_is_shifted(self, order_service, make_order, utc_now):
        order = make_order(estimated_ready_at=utc_now)

        updated = order_service.adjust_eta(order.id, -5)

        assert ensure_aware(updated.estimated_ready_at) == utc_now - timedelta(minutes=5)

    @pytest.mark.parametrize("delta", [0, 121, -121])
    def test_delta_out_of_range(self, order_service, mock_registry, make_order, delta):
        order = make_order()

        with pytest.raises(ValidationError):
            order_service.adjust_eta(order.id, delta)
        mock_registry.publish.assert_not_called()


class TestCancel:
    """cancel() is allowed from any non-terminal status."""

    @pytest.mark.parametrize("status", ["new", "paid", "preparing", "prepared"])
    def test_cancel_publishes_order_cancelled(self, order_service, mock_registry, make_order, status):
        order = make_order(status=status)

        cancelled = order_service.cancel(order.id)

        assert cancelled.status == "cancelled"
        event = published(mock_registry)[0]
        assert isinstance(event, OrderCancelledEvent)
        assert event.to_dict()["order_id"] == order.id
        assert event.to_dict()["status"] == "cancelled"

    @pytest.mark.parametrize("status", ["completed", "cancelled"])
    def test_terminal_orders_cannot_be_cancelled(self, order_service, mock_registry, make_order, status):
        order = make_order(status=status)

        with pytest.raises(InvalidTransitionError):
            order_service.cancel(order.id)
        mock_registry.publish.assert_not_called()


class TestCounterPayment:
    """mark_paid() and change_payment_method()."""

    def test_mark_paid_moves_new_to_paid(self, order_service, mock_registry, make_order):
        order = make_order(status="new", payment_method="cash")

        paid = order_service.mark_paid(order.id)

        assert paid.status == "paid"
        assert paid.paid_by == "cash"
        assert paid.paid_at is not None
        assert isinstance(published(mock_registry)[0], OrderPaidEvent)

    def test_mark_paid_keeps_kitchen_status(self, order_service, make_order):
        order = make_order(status="preparing", payment_method="cash")

        paid = order_service.mark_paid(order.id)

        assert paid.status == "preparing"
        assert paid.paid_by == "cash"

    def test_mark_paid_twice_rejected(self, order_service, mock_registry, make_order):
        order = make_order(status="new", payment_method="cash")
        order_service.mark_paid(order.id)
        mock_registry.publish.reset_mock()

        with pytest.raises(PaymentStateError):
            order_service.mark_paid(order.id)
        mock_registry.publish.assert_not_called()

    def test_cancelled_order_cannot_be_paid(self, order_service, make_order):
        order = make_order(status="cancelled")

        with pytest.raises(PaymentStateError):
            order_service.mark_paid(order.id)

    def test_change_payment_method_while_unpaid(self, order_service, mock_registry, make_order):
        order = make_order(payment_method="card")

        updated = order_service.change_payment_method(order.id, "cash")

        assert updated.payment_method == "cash"
        assert isinstance(published(mock_registry)[0], OrderUpdatedEvent)

    def test_change_payment_method_after_payment_rejected(self, order_service, make_order):
        order = make_order(payment_method="cash")
        order_service.mark_paid(order.id)

        with pytest.raises(PaymentStateError):
            order_service.change_payment_method(order.id, "card")


class TestCommitBeforePublish:
    """Nothing is published unless the write committed."""

    @pytest.mark.parametrize(
        "action",
        [
            lambda s, oid: s.update_status(oid, "preparing"),
            lambda s, oid: s.adjust_eta(oid, 5),
            lambda s, oid: s.cancel(oid),
            lambda s, oid: s.mark_paid(oid),
            lambda s, oid: s.change_payment_method(oid, "card"),
        ],
        ids=["update_status", "adjust_eta", "cancel", "mark_paid", "change_payment_method"],
    )
    def test_failed_commit_publishes_nothing(self, order_service, mock_registry, make_order, action):
        order = make_order(status="new", payment_method="cash")

        with patch(
            "rest_api.repositories.order.safe_commit",
            side_effect=OperationalError("COMMIT", {}, Exception("disk I/O error")),
        ):
            with pytest.raises(DatabaseError) as exc:
                action(order_service, order.id)

        assert exc.value.status_code == 500
        mock_registry.publish.assert_not_called()

    def test_failed_checkout_commit_publishes_nothing(self, payment_service, mock_registry, checkout_body):
        with patch(
            "rest_api.repositories.order.safe_commit",
            side_effect=OperationalError("COMMIT", {}, Exception("disk I/O error")),
        ):
            with pytest.raises(DatabaseError):
                payment_service.checkout_cash(CheckoutRequest.model_validate(checkout_body))

        mock_registry.publish.assert_not_called()

    def test_publish_failure_does_not_fail_mutation(self, db_session, make_order):
        registry = MagicMock(spec=PublisherRegistry)
        registry.publish.side_effect = RuntimeError("registry exploded")
        service = OrderService(db_session, OrderEventPublisher(registry))
        order = make_order(status="new")

        updated = service.update_status(order.id, "preparing")

        assert updated.status == "preparing"
        registry.publish.assert_called_once()

    def test_mutation_reaches_real_subscribers(self, db_session, make_order):
        registry = PublisherRegistry()
        sinks = [RecordingSink(), RecordingSink()]
        for sink in sinks:
            registry.subscribe(sink)
        service = OrderService(db_session, OrderEventPublisher(registry))
        order = make_order(status="new")

        service.update_status(order.id, "preparing")

        for sink in sinks:
            assert [e["event"] for e in sink.events] == ["order_updated"]
            assert sink.events[0]["order"]["status"] == "preparing"


class TestCheckout:
    """PaymentService checkout and card callbacks."""

    def test_card_checkout(self, payment_service, mock_registry, checkout_body):
        order = payment_service.checkout_card(CheckoutRequest.model_validate(checkout_body))

        assert order.status == "new"
        assert order.payment_method == "card"
        assert order.paid_by is None
        assert order.payment_reference.startswith("pi_")
        assert order.total == 15.75
        assert [i.title for i in order.items] == ["Burger", "Fries"]
        assert published(mock_registry)[0].kind == "order_created"

    def test_cash_checkout_is_unpaid(self, payment_service, checkout_body):
        order = payment_service.checkout_cash(CheckoutRequest.model_validate(checkout_body))

        assert order.status == "new"
        assert order.payment_method == "cash"
        assert order.paid_by is None
        assert order.paid_at is None
        assert order.payment_reference is None

    @pytest.mark.parametrize(
        "change,message",
        [
            ({"customer": {"name": "  ", "phone": "07700900123"}}, "Full name is required"),
            ({"customer": {"name": "Sam", "phone": ""}}, "Mobile number is required"),
            ({"items": []}, "Cart is empty"),
        ],
    )
    def test_checkout_validation(self, payment_service, mock_registry, checkout_body, change, message):
        body = {**checkout_body, **change}

        with pytest.raises(ValidationError) as exc:
            payment_service.checkout_card(CheckoutRequest.model_validate(body))

        assert exc.value.detail == message
        mock_registry.publish.assert_not_called()

    def test_minimum_order_total(self, payment_service, checkout_body):
        body = {**checkout_body, "items": [{"title": "Mint", "qty": 1, "price": 0.2}]}

        with pytest.raises(MinimumOrderError):
            payment_service.checkout_cash(CheckoutRequest.model_validate(body))

    def test_confirm_card(self, payment_service, mock_registry, checkout_body):
        order = payment_service.checkout_card(CheckoutRequest.model_validate(checkout_body))
        mock_registry.publish.reset_mock()

        paid = payment_service.confirm_card(order.payment_reference)

        assert paid.status == "paid"
        assert paid.paid_by == "card"
        assert paid.paid_at is not None
        assert isinstance(published(mock_registry)[0], OrderPaidEvent)

    def test_confirm_twice_rejected(self, payment_service, checkout_body):
        order = payment_service.checkout_card(CheckoutRequest.model_validate(checkout_body))
        payment_service.confirm_card(order.payment_reference)

        with pytest.raises(PaymentStateError):
            payment_service.confirm_card(order.payment_reference)

    def test_cancel_card(self, payment_service, mock_registry, checkout_body):
        order = payment_service.checkout_card(CheckoutRequest.model_validate(checkout_body))
        mock_registry.publish.reset_mock()

        cancelled = payment_service.cancel_card(order.payment_reference)

        assert cancelled.status == "cancelled"
        assert isinstance(published(mock_registry)[0], OrderCancelledEvent)

    def test_cancel_paid_card_rejected(self, payment_service, checkout_body):
        order = payment_service.checkout_card(CheckoutRequest.model_validate(checkout_body))
        payment_service.confirm_card(order.payment_reference)

        with pytest.raises(PaymentStateError):
            payment_service.cancel_card(order.payment_reference)

    def test_unknown_reference(self, payment_service):
        with pytest.raises(OrderNotFoundError):
            payment_service.confirm_card("pi_missing")
