"""
Sérialisation/désérialisation des métadonnées Stripe (category, entryType, entryFee, stripeFee).
Les frais lus ici font foi: ils proviennent du PaymentIntent réellement payé, pas du client.
"""
from typing import Any, Dict, Optional

from .fees import FeeBreakdown

# module concours.payments.metadata
def make_metadata(category: str, entry_type: str, fees: FeeBreakdown) -> Dict[str, str]:
    """Stripe n'accepte que des chaînes en metadata."""
    return {
        "category": category,
        "entryType": entry_type,
        "entryFee": str(fees.entry_fee),
        "stripeFee": str(fees.stripe_fee),
    }


def extract_fees(intent: Dict[str, Any]) -> Optional[FeeBreakdown]:
    """
    Relit (entryFee, stripeFee) depuis intent.metadata.
    - Retourne None si absents ou non entiers.
    """
    meta = (intent or {}).get("metadata") or {}
    try:
        entry_fee = int(meta.get("entryFee"))
        stripe_fee = int(meta.get("stripeFee"))
    except (TypeError, ValueError):
        return None
    return FeeBreakdown(entry_fee, stripe_fee, entry_fee + stripe_fee)


def extract_event_intent(event: Dict[str, Any]) -> Dict[str, Any]:
    """Extrait l'objet PaymentIntent d'un event Stripe (event.data.object)."""
    return ((event or {}).get("data") or {}).get("object") or {}
