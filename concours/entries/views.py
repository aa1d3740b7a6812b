# module concours.entries.views

"""Endpoints de la feature Entrées.
- POST /api/entries: soumission multipart (fichier optionnel), après paiement Stripe confirmé.
- GET /api/entries/{userId}: entrées du propriétaire, plus récentes d'abord.
- GET /api/file/{paymentIntentId}: téléchargement du fichier d'une entrée pitch-deck.
- DELETE /api/entries/{entryId}: suppression par le propriétaire (userId en JSON ou en query).
- GET /api/entry-rules: limites de validation publiées pour le front.
Les erreurs métier (concours.errors) sont rendues par le handler global (app_setup.exceptions).
"""
import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile

from concours import config
from concours.errors import EntryValidationError, FileSizeViolation, NotFound
from concours.entries import service as entries_service
from concours.entries.models import EntrySubmission, EntryType, UploadedFile
from concours.entries.repository import EntryRepository, get_entry_repository
from concours.entries.validation import entry_rules
from concours.payments.views import require_payments
from concours.utils.rate_limit import optional_rate_limit

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["Entries API"])

_FORM_FIELDS = {
    "user_id": "userId",
    "category": "category",
    "entry_type": "entryType",
    "title": "title",
    "description": "description",
    "text_content": "textContent",
    "video_url": "videoUrl",
    "payment_intent_id": "paymentIntentId",
}


def _text_field(form, key: str) -> Optional[str]:
    value = form.get(key)
    if value is None or isinstance(value, UploadFile):
        return None
    return str(value).strip() or None


def _content_disposition(file_name: str) -> str:
    # en-têtes HTTP en latin-1: nom non ASCII transmis via filename* (RFC 6266)
    try:
        file_name.encode("ascii")
        return f'attachment; filename="{file_name}"'
    except UnicodeEncodeError:
        fallback = file_name.encode("ascii", "replace").decode("ascii").replace("?", "_")
        return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(file_name)}"


async def _read_upload(upload: UploadFile) -> UploadedFile:
    """
    Bufferise le fichier en mémoire, au plus MAX_UPLOAD_BYTES + 1 octets.
    Au-delà: FileSizeViolation sans lire le reste.
    """
    data = await upload.read(config.MAX_UPLOAD_BYTES + 1)
    if len(data) > config.MAX_UPLOAD_BYTES:
        raise EntryValidationError([FileSizeViolation(
            "file",
            f"Fichier trop volumineux (maximum {config.MAX_UPLOAD_MB} Mo)",
            maxFileSize=config.MAX_UPLOAD_BYTES,
        )])
    return UploadedFile(
        filename=upload.filename or "upload",
        content_type=upload.content_type or "application/octet-stream",
        data=data,
    )


@router.get("/entry-rules")
def get_entry_rules() -> Dict[str, Any]:
    return entry_rules()


@router.post(
    "/entries",
    dependencies=[Depends(optional_rate_limit(times=10, seconds=60)), Depends(require_payments)],
)
async def submit_entry(request: Request, repository: EntryRepository = Depends(get_entry_repository)):
    """Soumet une entrée.
    Étapes:
    - Parse le formulaire multipart (champs camelCase + champ 'file' optionnel).
    - Délègue au service: champs requis, validation, vérification Stripe, persistance.
    - 201 {"message", "entryId"} à la création; 200 avec duplicate=true si le paiement a déjà servi.
    """
    form = await request.form()
    submission = EntrySubmission(**{attr: _text_field(form, key) for attr, key in _FORM_FIELDS.items()})
    file_field = form.get("file")
    upload: Optional[UploadedFile] = None
    # seul un pitch-deck stocke un fichier: un fichier joint à un autre type est ignoré
    if submission.entry_type == EntryType.pitch_deck.value and isinstance(file_field, UploadFile) and file_field.filename:
        upload = await _read_upload(file_field)

    logger.info(
        "entries.submit started user_id=%s entry_type=%s file=%s",
        submission.user_id, submission.entry_type, upload.filename if upload else None,
    )
    result = entries_service.submit_entry(repository, submission, upload)
    if result["created"]:
        return JSONResponse(
            status_code=201,
            content={"message": "Entrée soumise avec succès", "entryId": result["entryId"]},
        )
    return JSONResponse(
        status_code=200,
        content={"message": "Entrée déjà soumise pour ce paiement", "entryId": result["entryId"], "duplicate": True},
    )


@router.get("/entries/{user_id}")
def list_entries(user_id: str, repository: EntryRepository = Depends(get_entry_repository)):
    """Liste les entrées d'un utilisateur (sans payload fichier)."""
    entries = entries_service.list_user_entries(repository, user_id)
    logger.info("entries.list user_id=%s count=%s", user_id, len(entries))
    return entries


@router.get("/file/{payment_intent_id}")
def download_file(payment_intent_id: str, repository: EntryRepository = Depends(get_entry_repository)):
    """Renvoie le fichier d'une entrée pitch-deck en pièce jointe."""
    payload = entries_service.get_entry_file(repository, payment_intent_id)
    return Response(
        content=payload["data"],
        media_type=payload["file_type"],
        headers={"Content-Disposition": _content_disposition(payload["file_name"])},
    )


@router.delete("/entries/{entry_id}")
async def delete_entry(entry_id: str, request: Request, repository: EntryRepository = Depends(get_entry_repository)):
    """Supprime une entrée si userId (body JSON, sinon query) correspond au propriétaire."""
    user_id = request.query_params.get("userId")
    body = await request.body()
    if body:
        try:
            payload = await request.json()
        except ValueError:
            payload = {}
        if isinstance(payload, dict) and payload.get("userId"):
            user_id = str(payload["userId"])
    return entries_service.delete_user_entry(repository, entry_id, user_id)


@router.get("/create-test-entry/{user_id}", include_in_schema=False)
def create_test_entry(user_id: str, repository: EntryRepository = Depends(get_entry_repository)):
    """Route de développement: crée une entrée texte d'exemple (ENABLE_DEV_ROUTES=1)."""
    if not config.ENABLE_DEV_ROUTES:
        raise NotFound("Route introuvable")
    entry = entries_service.create_sample_entry(repository, user_id)
    return {"message": "Entrée de test créée", "id": entry.id, "title": entry.title}
