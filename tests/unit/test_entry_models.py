import pytest
from pydantic import ValidationError

from concours.entries.models import (
    Entry,
    PaymentStatus,
    PitchDeckContent,
    TextContent,
    VideoContent,
    file_url_for,
)


def _entry(content, **overrides):
    data = dict(
        user_id="user-1",
        category="technology",
        title="Titre d'entrée",
        content=content,
        entry_fee=99,
        stripe_fee=4,
        payment_intent_id="pi_123",
    )
    data.update(overrides)
    return Entry(**data)


def test_defaults_and_total():
    entry = _entry(TextContent(text_content="bonjour"))
    assert entry.payment_status is PaymentStatus.pending
    assert entry.status.value == "submitted"
    assert entry.total_amount == 103
    assert entry.entry_type.value == "text"


def test_to_row_keeps_a_single_payload():
    row = _entry(VideoContent(video_url="https://youtu.be/x")).to_row()
    assert row["entry_type"] == "video"
    assert row["video_url"] == "https://youtu.be/x"
    assert row["text_content"] is None and row["file_data"] is None
    assert row["total_amount"] == 103
    assert "id" not in row and "created_at" not in row


def test_from_row_rebuilds_variant():
    row = _entry(
        PitchDeckContent(file_data="JVBERg==", file_name="deck.pdf", file_type="application/pdf", file_size=4)
    ).to_row()
    row.update({"id": "e-1", "created_at": "2025-01-01T00:00:00+00:00"})
    entry = Entry.from_row(row)
    assert isinstance(entry.content, PitchDeckContent)
    assert entry.content.file_name == "deck.pdf"
    assert entry.id == "e-1"


def test_from_row_without_submission_date_falls_back():
    row = _entry(TextContent(text_content="x")).to_row()
    row["submission_date"] = None
    entry = Entry.from_row(row)
    assert entry.submission_date is not None


def test_public_view_hides_file_data():
    entry = _entry(
        PitchDeckContent(file_data="JVBERg==", file_name="deck.pdf", file_type="application/pdf", file_size=4)
    )
    public = entry.to_public()
    assert "fileData" not in public
    assert public["fileUrl"] == file_url_for("pi_123") == "/api/file/pi_123"
    assert public["fileName"] == "deck.pdf"
    assert public["entryType"] == "pitch-deck"
    assert entry.to_public(include_file_data=True)["fileData"] == "JVBERg=="


def test_unknown_category_rejected_by_model():
    with pytest.raises(ValidationError):
        _entry(TextContent(text_content="x"), category="sports")
