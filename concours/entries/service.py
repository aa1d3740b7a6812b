"""
Couche service de la feature 'entries'.
Rôles:
- submit_entry: intake -> présence du contenu -> validation -> vérification Stripe ->
  frais relus depuis le PaymentIntent -> persistance.
- list_user_entries / get_entry_file / delete_user_entry: lecture et suppression par propriétaire.
Le repository est toujours passé par l'appelant (injection depuis les vues).
"""
import base64
import binascii
import logging
from typing import Any, Dict, List, Optional
from uuid import uuid4

from concours.errors import Forbidden, InvalidCategory, InvalidEntryType, MissingField, MissingFile, NotFound, PaymentMismatch
from concours.entries.models import (
    CATEGORIES,
    ENTRY_TYPES,
    Entry,
    EntrySubmission,
    EntryType,
    PaymentStatus,
    PitchDeckContent,
    TextContent,
    UploadedFile,
    VideoContent,
)
from concours.entries.repository import EntryRepository
from concours.entries.validation import validate_entry
from concours.payments import service as payments_service
from concours.payments.fees import fees_for_category

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ["userId", "category", "entryType", "title", "paymentIntentId"]


def _check_required(form: EntrySubmission) -> None:
    values = {
        "userId": form.user_id,
        "category": form.category,
        "entryType": form.entry_type,
        "title": form.title,
        "paymentIntentId": form.payment_intent_id,
    }
    missing = [name for name in REQUIRED_FIELDS if not values[name]]
    if missing:
        raise MissingField(missing, required=REQUIRED_FIELDS)
    if form.category not in CATEGORIES:
        raise InvalidCategory(received=form.category, valid=CATEGORIES)
    if form.entry_type not in ENTRY_TYPES:
        raise InvalidEntryType(received=form.entry_type, valid=ENTRY_TYPES)


def build_content(form: EntrySubmission, upload: Optional[UploadedFile]):
    """Construit la variante de contenu correspondant à entry_type (un seul payload)."""
    if form.entry_type == EntryType.text.value:
        return TextContent(text_content=form.text_content or "")
    if form.entry_type == EntryType.pitch_deck.value:
        return PitchDeckContent(
            file_data=base64.b64encode(upload.data).decode("ascii"),
            file_name=upload.filename,
            file_type=upload.content_type,
            file_size=upload.size,
        )
    return VideoContent(video_url=(form.video_url or "").strip())


def submit_entry(repository: EntryRepository, form: EntrySubmission, upload: Optional[UploadedFile] = None) -> Dict[str, Any]:
    """
    Enregistre une entrée après vérification du paiement.
    Retour: {"entryId": <id>, "created": True} ou, si le PaymentIntent a déjà servi
    pour ce même utilisateur, {"entryId": <id existant>, "created": False}.
    Les frais stockés viennent exclusivement des metadata Stripe.
    """
    _check_required(form)
    if form.entry_type == EntryType.pitch_deck.value and upload is None:
        raise MissingFile()
    validate_entry(form, upload)

    verified = payments_service.verify_payment(form.payment_intent_id)
    fees = verified["fees"]
    paid = verified["intent"].get("metadata") or {}
    if paid.get("category") != form.category or paid.get("entryType") != form.entry_type:
        logger.warning(
            "entries.submit_entry payment mismatch payment_intent_id=%s paid=%s/%s submitted=%s/%s",
            form.payment_intent_id, paid.get("category"), paid.get("entryType"), form.category, form.entry_type,
        )
        raise PaymentMismatch(
            paid_category=paid.get("category"),
            submitted_category=form.category,
            paid_entry_type=paid.get("entryType"),
            submitted_entry_type=form.entry_type,
        )

    existing = repository.get_by_payment_intent(form.payment_intent_id)
    if existing is not None:
        if existing.user_id != form.user_id:
            raise Forbidden()
        logger.info("entries.submit_entry replay payment_intent_id=%s entry_id=%s", form.payment_intent_id, existing.id)
        return {"entryId": existing.id, "created": False}

    entry = Entry(
        user_id=form.user_id,
        category=form.category,
        title=form.title,
        description=form.description or None,
        content=build_content(form, upload),
        entry_fee=fees.entry_fee,
        stripe_fee=fees.stripe_fee,
        payment_intent_id=form.payment_intent_id,
        payment_status=PaymentStatus.succeeded,
    )
    saved = repository.insert(entry)
    logger.info("entries.submit_entry created entry_id=%s user_id=%s", saved.id, saved.user_id)
    return {"entryId": saved.id, "created": True}


def list_user_entries(repository: EntryRepository, user_id: str) -> List[Dict[str, Any]]:
    """Entrées du propriétaire, plus récentes d'abord; pitch-deck: fileUrl au lieu de fileData."""
    return [entry.to_public() for entry in repository.list_by_user(user_id)]


def get_entry_file(repository: EntryRepository, payment_intent_id: str) -> Dict[str, Any]:
    """
    Retourne le fichier d'une entrée pitch-deck.
    Retour: {"data": bytes, "file_name", "file_type", "file_size"}
    """
    entry = repository.get_by_payment_intent(payment_intent_id)
    if entry is None or not isinstance(entry.content, PitchDeckContent) or not entry.content.file_data:
        raise NotFound("Fichier introuvable")
    try:
        data = base64.b64decode(entry.content.file_data)
    except (binascii.Error, ValueError):
        logger.exception("entries.get_entry_file corrupt payload payment_intent_id=%s", payment_intent_id)
        raise NotFound("Fichier introuvable")
    return {
        "data": data,
        "file_name": entry.content.file_name,
        "file_type": entry.content.file_type,
        "file_size": len(data),
    }


def delete_user_entry(repository: EntryRepository, entry_id: str, user_id: Optional[str]) -> Dict[str, Any]:
    """
    Suppression définitive par le propriétaire.
    - NotFound si l'entrée n'existe pas
    - Forbidden (message générique) si userId ne correspond pas
    """
    entry = repository.get(entry_id)
    if entry is None:
        raise NotFound("Entrée introuvable")
    if not user_id or entry.user_id != user_id:
        logger.info("entries.delete_user_entry denied entry_id=%s", entry_id)
        raise Forbidden()
    repository.delete(entry_id)
    logger.info("entries.delete_user_entry deleted entry_id=%s", entry_id)
    return {"message": "Entrée supprimée", "entryId": entry_id}


SAMPLE_TEXT = (
    "This is a comprehensive business strategy for digital transformation in modern enterprises. "
    "We focus on leveraging cutting-edge technologies to streamline operations, enhance customer experience, "
    "and drive sustainable growth. Our approach encompasses market analysis, competitive positioning, "
    "resource allocation, and strategic partnerships. The implementation roadmap includes phases for "
    "technology adoption, team training, and performance monitoring to ensure successful transformation outcomes. "
) * 2


def create_sample_entry(repository: EntryRepository, user_id: str) -> Entry:
    """
    Entrée texte de démonstration (routes de dev uniquement).
    Frais calculés localement: aucun paiement réel n'est associé.
    """
    fees = fees_for_category("business")
    entry = Entry(
        user_id=user_id,
        category="business",
        title="Sample Business Strategy Entry",
        description="A comprehensive business strategy for digital transformation in modern enterprises",
        content=TextContent(text_content=SAMPLE_TEXT),
        entry_fee=fees.entry_fee,
        stripe_fee=fees.stripe_fee,
        payment_intent_id=f"pi_test_{uuid4().hex}",
        payment_status=PaymentStatus.succeeded,
    )
    return repository.insert(entry)
