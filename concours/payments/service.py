"""
Cas d'usage 'payments': orchestre fees, metadata et stripe_client.
- issue_payment_intent: calcule les frais et crée le PaymentIntent (aucune écriture locale)
- verify_payment: vérifie qu'un PaymentIntent est payé et relit les frais depuis ses metadata
- handle_webhook_event: réconcilie payment_status lorsqu'un paiement échoue après coup
"""
import logging
from typing import Any, Dict, Optional

from concours import config
from concours.errors import InvalidEntryType, MissingField, PaymentIncomplete, PaymentLookupError
from concours.entries.models import ENTRY_TYPES

from . import fees as fee_logic
from . import metadata as meta
from . import stripe_client

logger = logging.getLogger(__name__)

PAYMENT_FAILED_EVENT = "payment_intent.payment_failed"

# module concours.payments.service
def issue_payment_intent(*, category: Optional[str], entry_type: Optional[str]) -> Dict[str, Any]:
    """
    Prépare le paiement d'une entrée.
    Retour: {clientSecret, entryFee, stripeFee, totalAmount}
    """
    missing = [name for name, value in (("category", category), ("entryType", entry_type)) if not value]
    if missing:
        raise MissingField(missing, required=["category", "entryType"])
    breakdown = fee_logic.fees_for_category(category)
    if entry_type not in ENTRY_TYPES:
        raise InvalidEntryType(received=entry_type, valid=ENTRY_TYPES)

    intent = stripe_client.create_payment_intent(
        amount=breakdown.total_amount * 100,
        currency=config.PAYMENT_CURRENCY,
        metadata=meta.make_metadata(category, entry_type, breakdown),
    )
    logger.info("payments.issue_payment_intent created id=%s total=%s", intent.get("id"), breakdown.total_amount)
    return {"clientSecret": intent.get("client_secret"), **breakdown.to_dict()}


def verify_payment(payment_intent_id: str) -> Dict[str, Any]:
    """
    Vérifie le paiement côté Stripe avant toute persistance.
    - PaymentIncomplete si status != 'succeeded' (porte le statut Stripe)
    - PaymentLookupError si les metadata de frais sont illisibles
    Retour: {"intent": <dict>, "fees": FeeBreakdown}
    """
    intent = stripe_client.retrieve_payment_intent(payment_intent_id)
    status = intent.get("status")
    if status != "succeeded":
        logger.info("payments.verify_payment incomplete id=%s status=%s", payment_intent_id, status)
        raise PaymentIncomplete(status)
    breakdown = meta.extract_fees(intent)
    if breakdown is None:
        raise PaymentLookupError(payment_intent_id, message="Métadonnées de frais absentes du paiement")
    return {"intent": intent, "fees": breakdown}


def handle_webhook_event(event: Dict[str, Any], repository) -> Dict[str, Any]:
    """
    Traite un event Stripe déjà authentifié.
    - payment_intent.payment_failed: passe l'entrée correspondante en 'failed'
      (aucune entrée connue: no-op silencieux)
    - autres types: acquittés et ignorés
    """
    event_type = (event or {}).get("type")
    if event_type != PAYMENT_FAILED_EVENT:
        return {"received": True, "handled": False}
    payment_intent_id = meta.extract_event_intent(event).get("id")
    if not payment_intent_id:
        return {"received": True, "handled": False}
    updated = repository.mark_payment_failed(payment_intent_id)
    logger.info("payments.webhook payment_failed id=%s updated=%s", payment_intent_id, updated)
    return {"received": True, "handled": True, "updated": updated}
