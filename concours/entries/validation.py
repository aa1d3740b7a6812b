"""
Validation structurelle d'une entrée (pure: pas de Stripe, pas de DB).

- collect_violations: retourne toutes les violations (aucun court-circuit)
- validate_entry: soulève EntryValidationError si au moins une violation
- entry_rules: publie les mêmes limites pour le guidage côté client
"""
import re
from typing import Any, Dict, List, Optional

from concours import config
from concours.errors import (
    DescriptionViolation,
    EntryValidationError,
    FileSizeViolation,
    FileTypeViolation,
    InvalidVideoUrl,
    RequiredField,
    TextLengthViolation,
    TitleViolation,
    Violation,
)
from concours.entries.models import CATEGORIES, ENTRY_TYPES, EntrySubmission, EntryType, UploadedFile
from concours.payments.fees import ENTRY_FEES, compute_fees

TITLE_MIN, TITLE_MAX = 5, 100
DESCRIPTION_MAX = 1000
WORDS_MIN, WORDS_MAX = 100, 2000

ALLOWED_FILE_TYPES = {
    "application/pdf": ".pdf",
    "application/vnd.ms-powerpoint": ".ppt",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation": ".pptx",
}

VIDEO_URL_PATTERN = re.compile(r"^(https?://)?(www\.)?(youtube\.com|youtu\.be|vimeo\.com)", re.IGNORECASE)


def count_words(text: Optional[str]) -> int:
    # split() sans argument ignore déjà les tokens vides
    return len((text or "").split())


def is_valid_video_url(url: Optional[str]) -> bool:
    return bool(url) and VIDEO_URL_PATTERN.match(url.strip()) is not None


def _check_title(title: Optional[str]) -> List[Violation]:
    if not title:
        return [RequiredField("title", "Titre requis")]
    if not TITLE_MIN <= len(title) <= TITLE_MAX:
        return [TitleViolation(
            "title",
            f"Le titre doit contenir entre {TITLE_MIN} et {TITLE_MAX} caractères",
            length=len(title),
        )]
    return []


def _check_text(text_content: Optional[str]) -> List[Violation]:
    if not text_content or not text_content.strip():
        return [RequiredField("textContent", "Contenu texte requis pour les entrées texte")]
    words = count_words(text_content)
    if not WORDS_MIN <= words <= WORDS_MAX:
        return [TextLengthViolation(
            "textContent",
            f"Les entrées texte doivent contenir entre {WORDS_MIN} et {WORDS_MAX} mots",
            wordCount=words,
        )]
    return []


def _check_file(upload: Optional[UploadedFile]) -> List[Violation]:
    if upload is None:
        return [RequiredField("file", "Fichier requis pour les entrées pitch-deck")]
    violations: List[Violation] = []
    if upload.content_type not in ALLOWED_FILE_TYPES:
        violations.append(FileTypeViolation(
            "file",
            "Type de fichier invalide. Seuls les fichiers PDF et PPT sont acceptés.",
            fileType=upload.content_type,
            allowedTypes=list(ALLOWED_FILE_TYPES),
        ))
    if upload.size > config.MAX_UPLOAD_BYTES:
        violations.append(FileSizeViolation(
            "file",
            f"Fichier trop volumineux (maximum {config.MAX_UPLOAD_MB} Mo)",
            fileSize=upload.size,
            maxFileSize=config.MAX_UPLOAD_BYTES,
        ))
    return violations


def _check_video(video_url: Optional[str]) -> List[Violation]:
    if not is_valid_video_url(video_url):
        return [InvalidVideoUrl("videoUrl", "URL YouTube ou Vimeo valide requise pour les entrées vidéo")]
    return []


def collect_violations(candidate: EntrySubmission, upload: Optional[UploadedFile] = None) -> List[Violation]:
    """
    Contrôle complet d'une entrée candidate.
    - category, entryType, title requis; title dans [5, 100]
    - texte: 100 à 2000 mots; pitch-deck: PDF/PPT(X) sous la limite d'upload; vidéo: YouTube/Vimeo
    """
    violations: List[Violation] = []
    if not candidate.category:
        violations.append(RequiredField("category", "Catégorie requise"))
    if not candidate.entry_type:
        violations.append(RequiredField("entryType", "Type d'entrée requis"))
    violations.extend(_check_title(candidate.title))
    if candidate.description and len(candidate.description) > DESCRIPTION_MAX:
        violations.append(DescriptionViolation(
            "description",
            f"La description ne doit pas dépasser {DESCRIPTION_MAX} caractères",
            length=len(candidate.description),
        ))

    if candidate.entry_type == EntryType.text.value:
        violations.extend(_check_text(candidate.text_content))
    elif candidate.entry_type == EntryType.pitch_deck.value:
        violations.extend(_check_file(upload))
    elif candidate.entry_type == EntryType.video.value:
        violations.extend(_check_video(candidate.video_url))
    return violations


def validate_entry(candidate: EntrySubmission, upload: Optional[UploadedFile] = None) -> None:
    violations = collect_violations(candidate, upload)
    if violations:
        raise EntryValidationError(violations)


def entry_rules() -> Dict[str, Any]:
    """Limites publiées au front (mêmes constantes que la validation serveur)."""
    return {
        "categories": [{"category": c, **compute_fees(ENTRY_FEES[c]).to_dict()} for c in CATEGORIES],
        "entryTypes": ENTRY_TYPES,
        "title": {"minLength": TITLE_MIN, "maxLength": TITLE_MAX},
        "description": {"maxLength": DESCRIPTION_MAX},
        "textContent": {"minWords": WORDS_MIN, "maxWords": WORDS_MAX},
        "file": {
            "allowedTypes": list(ALLOWED_FILE_TYPES),
            "allowedExtensions": list(ALLOWED_FILE_TYPES.values()),
            "maxSizeBytes": config.MAX_UPLOAD_BYTES,
            "maxSizeMb": config.MAX_UPLOAD_MB,
        },
        "videoUrl": {"hosts": ["youtube.com", "youtu.be", "vimeo.com"]},
    }
