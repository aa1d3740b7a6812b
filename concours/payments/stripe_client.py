"""
Adaptateur Stripe: centralise les appels et la configuration Stripe (PaymentIntent + webhooks).
Les erreurs SDK sont traduites en erreurs métier (concours.errors) ici, et nulle part ailleurs.
"""
import logging
from typing import Any, Dict

import stripe
from fastapi import Request

from concours import config
from concours.errors import (
    PaymentLookupError,
    PaymentProviderError,
    ServiceUnavailable,
    WebhookAuthError,
)

logger = logging.getLogger(__name__)

# module concours.payments.stripe_client
def _as_dict(obj: Any) -> Dict[str, Any]:
    """Les objets Stripe sont convertis en dict (récursif) pour découpler le reste du code du SDK."""
    if obj is None:
        return {}
    for attr in ("to_dict_recursive", "to_dict"):
        fn = getattr(obj, attr, None)
        if callable(fn):
            return fn()
    return dict(obj)


def stripe_ready() -> bool:
    return bool(config.STRIPE_SECRET_KEY)


def require_stripe():
    """
    Prépare et retourne le module stripe prêt à l'emploi.
    - Configure stripe.api_key via STRIPE_SECRET_KEY (une seule fois par process).
    - Soulève ServiceUnavailable si la clé est absente (503).
    """
    if not config.STRIPE_SECRET_KEY:
        raise ServiceUnavailable("Service indisponible: Stripe non initialisé (STRIPE_SECRET_KEY manquant)")
    if stripe.api_key != config.STRIPE_SECRET_KEY:
        stripe.api_key = config.STRIPE_SECRET_KEY
        logger.info("Stripe initialisé")
    return stripe


def create_payment_intent(*, amount: int, currency: str, metadata: Dict[str, str]) -> Dict[str, Any]:
    """
    Crée un PaymentIntent Stripe.
    - amount: montant en unités mineures (centimes)
    - metadata: détail des frais, relu à la soumission
    Retour: dict incluant "id" et "client_secret".
    """
    require_stripe()
    try:
        intent = stripe.PaymentIntent.create(
            amount=amount,
            currency=currency,
            automatic_payment_methods={"enabled": True},
            metadata=metadata,
        )
    except stripe.StripeError as e:
        logger.exception("stripe_client.create_payment_intent failed amount=%s", amount)
        raise PaymentProviderError(getattr(e, "user_message", None) or str(e))
    return _as_dict(intent)


def retrieve_payment_intent(payment_intent_id: str) -> Dict[str, Any]:
    """
    Récupère un PaymentIntent par son identifiant.
    - PaymentLookupError si Stripe ne le connaît pas
    - PaymentProviderError pour toute autre erreur du fournisseur
    """
    require_stripe()
    try:
        intent = stripe.PaymentIntent.retrieve(payment_intent_id)
    except stripe.InvalidRequestError as e:
        logger.warning("stripe_client.retrieve_payment_intent not found id=%s: %s", payment_intent_id, e)
        raise PaymentLookupError(payment_intent_id)
    except stripe.StripeError as e:
        logger.exception("stripe_client.retrieve_payment_intent failed id=%s", payment_intent_id)
        raise PaymentProviderError(getattr(e, "user_message", None) or str(e))
    return _as_dict(intent)


async def parse_event(request: Request) -> Dict[str, Any]:
    """
    Parse et valide un événement Stripe signé (webhook).
    - Lit le body brut + en-tête Stripe-Signature
    - Valide la signature via Webhook.construct_event (STRIPE_WEBHOOK_SECRET)
    Retour: l'event sous forme de dict si la signature est valide.
    """
    require_stripe()
    if not config.STRIPE_WEBHOOK_SECRET:
        raise ServiceUnavailable("Service indisponible: STRIPE_WEBHOOK_SECRET manquant")
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature") or ""
    try:
        event = stripe.Webhook.construct_event(payload, sig_header, config.STRIPE_WEBHOOK_SECRET)
    except (ValueError, stripe.SignatureVerificationError) as e:
        logger.warning("stripe_client.parse_event rejected: %s", e)
        raise WebhookAuthError(f"Webhook invalide: {e}")
    return _as_dict(event)
