"""
Calcul des frais (pur: pas de Stripe, pas de DB).
"""
from typing import Any, Dict, NamedTuple

from concours.errors import InvalidCategory

# module concours.payments.fees
ENTRY_FEES: Dict[str, int] = {
    "business": 49,
    "creative": 49,
    "technology": 99,
    "social-impact": 49,
}

# Surcharge de traitement, en pourcentage du frais de base
STRIPE_FEE_PERCENT = 4


class FeeBreakdown(NamedTuple):
    entry_fee: int
    stripe_fee: int
    total_amount: int

    def to_dict(self) -> Dict[str, Any]:
        return {"entryFee": self.entry_fee, "stripeFee": self.stripe_fee, "totalAmount": self.total_amount}


def entry_fee_for(category: Any) -> int:
    """
    Frais de base d'une catégorie.
    - Soulève InvalidCategory si la catégorie n'est pas dans la table.
    """
    fee = ENTRY_FEES.get(category) if isinstance(category, str) else None
    if fee is None:
        raise InvalidCategory(received=category, valid=list(ENTRY_FEES))
    return fee


def compute_fees(entry_fee: int) -> FeeBreakdown:
    """
    stripe_fee = ceil(entry_fee * 4%), arrondi toujours à l'unité supérieure.
    Arithmétique entière pour éviter les erreurs d'arrondi flottant.
    """
    stripe_fee = -(-entry_fee * STRIPE_FEE_PERCENT // 100)
    return FeeBreakdown(entry_fee, stripe_fee, entry_fee + stripe_fee)


def fees_for_category(category: Any) -> FeeBreakdown:
    return compute_fees(entry_fee_for(category))
