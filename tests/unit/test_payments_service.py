import pytest

from concours.errors import InvalidCategory, InvalidEntryType, MissingField, PaymentIncomplete
from concours.payments import service


def test_issue_payment_intent_amount_and_metadata(fake_stripe):
    result = service.issue_payment_intent(category="technology", entry_type="video")
    assert result["entryFee"] == 99
    assert result["stripeFee"] == 4
    assert result["totalAmount"] == 103
    assert result["clientSecret"].startswith("pi_fake_1")

    intent = fake_stripe.intents["pi_fake_1"]
    assert intent["amount"] == 10300
    assert intent["currency"] == "usd"
    assert intent["metadata"] == {"category": "technology", "entryType": "video", "entryFee": "99", "stripeFee": "4"}


def test_issue_payment_intent_rejections(fake_stripe):
    with pytest.raises(MissingField) as exc:
        service.issue_payment_intent(category=None, entry_type="text")
    assert exc.value.extra["missing"] == ["category"]
    with pytest.raises(InvalidCategory):
        service.issue_payment_intent(category="sports", entry_type="text")
    with pytest.raises(InvalidEntryType):
        service.issue_payment_intent(category="business", entry_type="audio")
    assert fake_stripe.intents == {}


def test_verify_payment(fake_stripe, paid_intent):
    pi_id = paid_intent("business")
    verified = service.verify_payment(pi_id)
    assert verified["fees"].total_amount == 51
    assert verified["intent"]["id"] == pi_id

    pending = paid_intent("business", status="processing")
    with pytest.raises(PaymentIncomplete):
        service.verify_payment(pending)


def test_webhook_payment_failed_marks_entry(repository, paid_intent):
    from concours.entries import service as entries_service
    from concours.entries.models import EntrySubmission

    pi_id = paid_intent("technology")
    text = " ".join(["mot"] * 120)
    result = entries_service.submit_entry(
        repository,
        EntrySubmission(
            user_id="u1", category="technology", entry_type="text", title="Titre ok",
            text_content=text, payment_intent_id=pi_id,
        ),
    )
    event = {"type": "payment_intent.payment_failed", "data": {"object": {"id": pi_id}}}
    assert service.handle_webhook_event(event, repository) == {"received": True, "handled": True, "updated": 1}
    assert repository.rows[result["entryId"]]["payment_status"] == "failed"


def test_webhook_unknown_intent_is_noop(repository):
    event = {"type": "payment_intent.payment_failed", "data": {"object": {"id": "pi_inconnu"}}}
    assert service.handle_webhook_event(event, repository)["updated"] == 0


def test_webhook_other_events_ignored(repository):
    event = {"type": "payment_intent.succeeded", "data": {"object": {"id": "pi_1"}}}
    assert service.handle_webhook_event(event, repository) == {"received": True, "handled": False}
