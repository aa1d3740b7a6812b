import logging
from typing import Any, Dict

from fastapi import APIRouter, Request, Depends
from fastapi.responses import JSONResponse

from concours.errors import MissingField
from concours.utils.rate_limit import optional_rate_limit
from concours.entries.repository import EntryRepository, get_entry_repository

# Services Payments
from concours.payments import fees as payments_fees
from concours.payments import stripe_client
from concours.payments import service as payments_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["Payments API"])


def require_payments() -> None:
    """
    Dépendance: Stripe doit être configuré (STRIPE_SECRET_KEY), sinon 503 ServiceUnavailable.
    """
    stripe_client.require_stripe()

# module concours.payments.views
@router.get("/fees/{category}")
def get_fees(category: str) -> Dict[str, Any]:
    """Barème d'une catégorie: {category, entryFee, stripeFee, totalAmount} (400 si inconnue)."""
    return {"category": category, **payments_fees.fees_for_category(category).to_dict()}


@router.post(
    "/create-payment-intent",
    dependencies=[Depends(optional_rate_limit(times=10, seconds=60)), Depends(require_payments)],
)
async def create_payment_intent(request: Request):
    """
    Crée un PaymentIntent Stripe pour une entrée.
    - Entrée JSON: { "category": "<catégorie>", "entryType": "<type>" }
    - Étapes:
      1) Calcul des frais de la catégorie (fees_for_category)
      2) Création du PaymentIntent (montant total en centimes, frais en metadata)
    - Retour: {clientSecret, entryFee, stripeFee, totalAmount}
    - Erreurs: 400 (champ manquant, catégorie/type invalides), 500 si Stripe refuse
    """
    try:
        body = await request.json()
    except ValueError:
        body = None
    if not isinstance(body, dict):
        raise MissingField(["category", "entryType"], required=["category", "entryType"])
    result = payments_service.issue_payment_intent(
        category=body.get("category"),
        entry_type=body.get("entryType"),
    )
    return JSONResponse(result)


@router.post("/webhook", include_in_schema=False)
async def webhook_stripe(request: Request, repository: EntryRepository = Depends(get_entry_repository)):
    """
    Webhook Stripe (PaymentIntent).
    - Signature: validée via stripe_client.parse_event (Stripe-Signature + STRIPE_WEBHOOK_SECRET), 400 sinon
    - payment_intent.payment_failed: l'entrée liée passe en payment_status='failed'
    - Réponses: {"received": true, "handled": <bool>, ...}
    """
    event = await stripe_client.parse_event(request)
    result = payments_service.handle_webhook_event(event, repository)
    logger.info("payments.webhook type=%s handled=%s", (event or {}).get("type"), result.get("handled"))
    return JSONResponse(result)
