"""
Taxonomie des erreurs métier du backend concours.

Chaque erreur porte:
- kind: identifiant machine (ex: "MissingField"), renvoyé dans le champ "error"
- message: message humain
- status_code: code HTTP appliqué par le handler (app_setup.exceptions)
- extra: détails complémentaires fusionnés dans le body JSON
"""
from typing import Any, Dict, List, Optional


class AppError(Exception):
    kind = "AppError"
    status_code = 500

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra: Dict[str, Any] = extra

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.kind, "message": self.message}
        body.update(self.extra)
        return body


# --- Erreurs de saisie (400) ---

class MissingField(AppError):
    kind = "MissingField"
    status_code = 400

    def __init__(self, missing: List[str], required: Optional[List[str]] = None):
        message = f"Champs requis manquants: {', '.join(missing)}"
        super().__init__(message, missing=list(missing), required=list(required or missing))


class InvalidCategory(AppError):
    kind = "InvalidCategory"
    status_code = 400

    def __init__(self, received: Any, valid: List[str]):
        super().__init__("Catégorie invalide", received=received, validCategories=list(valid))


class InvalidEntryType(AppError):
    kind = "InvalidEntryType"
    status_code = 400

    def __init__(self, received: Any, valid: List[str]):
        super().__init__("Type d'entrée invalide", received=received, validEntryTypes=list(valid))


class MissingFile(AppError):
    kind = "MissingFile"
    status_code = 400

    def __init__(self, message: str = "Fichier requis pour les entrées pitch-deck"):
        super().__init__(message)


class Violation(AppError):
    """Violation structurelle d'un champ; agrégée par EntryValidationError."""
    status_code = 400

    def __init__(self, field: str, message: str, **extra: Any):
        super().__init__(message, field=field, **extra)
        self.field = field


class RequiredField(Violation):
    kind = "MissingField"


class TitleViolation(Violation):
    kind = "TitleViolation"


class DescriptionViolation(Violation):
    kind = "DescriptionViolation"


class TextLengthViolation(Violation):
    kind = "TextLengthViolation"


class FileTypeViolation(Violation):
    kind = "FileTypeViolation"


class FileSizeViolation(Violation):
    kind = "FileSizeViolation"


class InvalidVideoUrl(Violation):
    kind = "InvalidVideoUrl"


class EntryValidationError(AppError):
    """Regroupe toutes les violations d'une entrée (pas de court-circuit)."""
    status_code = 400

    def __init__(self, violations: List[AppError]):
        self.violations = list(violations)
        first = self.violations[0] if self.violations else None
        self.kind = first.kind if first else "ValidationError"
        message = first.message if first else "Entrée invalide"
        super().__init__(message, violations=[v.to_dict() for v in self.violations])


# --- Paiement ---

class PaymentProviderError(AppError):
    kind = "PaymentProviderError"
    status_code = 500

    def __init__(self, provider_message: str):
        super().__init__(provider_message or "Erreur du fournisseur de paiement")


class PaymentLookupError(AppError):
    kind = "PaymentLookupError"
    status_code = 404

    def __init__(self, payment_intent_id: str, message: str = "Paiement introuvable"):
        super().__init__(message, paymentIntentId=payment_intent_id)


class PaymentIncomplete(AppError):
    kind = "PaymentIncomplete"
    status_code = 400

    def __init__(self, payment_status: Optional[str]):
        super().__init__("Paiement non complété", paymentStatus=payment_status)


class PaymentMismatch(AppError):
    """Le PaymentIntent a été payé pour une autre catégorie ou un autre type d'entrée."""
    kind = "PaymentMismatch"
    status_code = 400

    def __init__(self, *, paid_category, submitted_category, paid_entry_type, submitted_entry_type):
        super().__init__(
            "Le paiement ne correspond pas à la catégorie ou au type d'entrée soumis",
            paidCategory=paid_category,
            submittedCategory=submitted_category,
            paidEntryType=paid_entry_type,
            submittedEntryType=submitted_entry_type,
        )


class WebhookAuthError(AppError):
    kind = "WebhookAuthError"
    status_code = 400

    def __init__(self, message: str = "Signature webhook invalide"):
        super().__init__(message)


# --- Stockage / accès ---

class PersistenceError(AppError):
    kind = "PersistenceError"
    status_code = 500


class NotFound(AppError):
    kind = "NotFound"
    status_code = 404


class Forbidden(AppError):
    kind = "Forbidden"
    status_code = 403

    def __init__(self, message: str = "Action non autorisée"):
        super().__init__(message)


class ServiceUnavailable(AppError):
    kind = "ServiceUnavailable"
    status_code = 503
