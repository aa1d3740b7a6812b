"""
Module 'payments' (feature-first): point d'entrée public.
Réunit barème des frais et metadata Stripe. Le client Stripe, les services et les vues
s'importent depuis leurs modules (concours.payments.stripe_client, .service, .views).
"""

from .fees import ENTRY_FEES, STRIPE_FEE_PERCENT, FeeBreakdown, compute_fees, entry_fee_for, fees_for_category
from .metadata import make_metadata, extract_fees, extract_event_intent

__all__ = [
    # fees
    "ENTRY_FEES",
    "STRIPE_FEE_PERCENT",
    "FeeBreakdown",
    "compute_fees",
    "entry_fee_for",
    "fees_for_category",
    # metadata
    "make_metadata",
    "extract_fees",
    "extract_event_intent",
]
