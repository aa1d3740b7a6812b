"""
Modèles de la feature 'entries'.

Le contenu d'une entrée est une variante étiquetée par entry_type: un seul
payload par type (texte, pitch-deck, vidéo), validé par pydantic (union discriminée).
La base stocke une ligne plate: to_row()/from_row() aplatissent et reconstruisent la variante.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Category(str, Enum):
    business = "business"
    creative = "creative"
    technology = "technology"
    social_impact = "social-impact"


class EntryType(str, Enum):
    text = "text"
    pitch_deck = "pitch-deck"
    video = "video"


class PaymentStatus(str, Enum):
    pending = "pending"
    succeeded = "succeeded"
    failed = "failed"


class ReviewStatus(str, Enum):
    submitted = "submitted"
    under_review = "under-review"
    finalist = "finalist"
    winner = "winner"
    rejected = "rejected"


CATEGORIES = [c.value for c in Category]
ENTRY_TYPES = [t.value for t in EntryType]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TextContent(_CamelModel):
    entry_type: Literal["text"] = "text"
    text_content: str


class PitchDeckContent(_CamelModel):
    entry_type: Literal["pitch-deck"] = "pitch-deck"
    file_data: str  # base64
    file_name: str
    file_type: str
    file_size: int


class VideoContent(_CamelModel):
    entry_type: Literal["video"] = "video"
    video_url: str


EntryContent = Annotated[
    Union[TextContent, PitchDeckContent, VideoContent],
    Field(discriminator="entry_type"),
]

_CONTENT_COLUMNS = ("text_content", "file_data", "file_name", "file_type", "file_size", "video_url")


def file_url_for(payment_intent_id: str) -> str:
    """URL de téléchargement dérivée (jamais stockée)."""
    return f"/api/file/{payment_intent_id}"


class Entry(_CamelModel):
    id: Optional[str] = None
    user_id: str
    category: Category
    title: str
    description: Optional[str] = None
    content: EntryContent
    entry_fee: int
    stripe_fee: int
    payment_intent_id: str
    payment_status: PaymentStatus = PaymentStatus.pending
    status: ReviewStatus = ReviewStatus.submitted
    submission_date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    created_at: Optional[datetime] = None

    @property
    def entry_type(self) -> EntryType:
        return EntryType(self.content.entry_type)

    @property
    def total_amount(self) -> int:
        return self.entry_fee + self.stripe_fee

    def to_row(self) -> Dict[str, Any]:
        """Ligne plate (snake_case) pour la table entries. id/created_at sont gérés par la base."""
        row: Dict[str, Any] = {column: None for column in _CONTENT_COLUMNS}
        row.update({
            "user_id": self.user_id,
            "category": self.category.value,
            "entry_type": self.entry_type.value,
            "title": self.title,
            "description": self.description,
            "entry_fee": self.entry_fee,
            "stripe_fee": self.stripe_fee,
            "total_amount": self.total_amount,
            "payment_intent_id": self.payment_intent_id,
            "payment_status": self.payment_status.value,
            "status": self.status.value,
            "submission_date": self.submission_date.isoformat(),
        })
        row.update(self.content.model_dump(exclude={"entry_type"}))
        return row

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Entry":
        """Reconstruit une entrée depuis une ligne de la table (variante choisie par entry_type)."""
        entry_type = row.get("entry_type")
        content: Dict[str, Any] = {"entry_type": entry_type}
        if entry_type == EntryType.text.value:
            content["text_content"] = row.get("text_content") or ""
        elif entry_type == EntryType.pitch_deck.value:
            content.update({
                "file_data": row.get("file_data") or "",
                "file_name": row.get("file_name") or "",
                "file_type": row.get("file_type") or "",
                "file_size": int(row.get("file_size") or 0),
            })
        elif entry_type == EntryType.video.value:
            content["video_url"] = row.get("video_url") or ""
        data = {
            "id": str(row["id"]) if row.get("id") is not None else None,
            "user_id": row.get("user_id"),
            "category": row.get("category"),
            "title": row.get("title"),
            "description": row.get("description"),
            "content": content,
            "entry_fee": row.get("entry_fee"),
            "stripe_fee": row.get("stripe_fee"),
            "payment_intent_id": row.get("payment_intent_id"),
            "payment_status": row.get("payment_status") or PaymentStatus.pending.value,
            "status": row.get("status") or ReviewStatus.submitted.value,
            "submission_date": row.get("submission_date") or row.get("created_at"),
            "created_at": row.get("created_at"),
        }
        if data["submission_date"] is None:
            data.pop("submission_date")
        return cls.model_validate(data)

    def to_public(self, include_file_data: bool = False) -> Dict[str, Any]:
        """
        Représentation JSON (camelCase, plate) renvoyée au front.
        - pitch-deck: fileData est retiré par défaut, remplacé par fileUrl dérivée.
        """
        data: Dict[str, Any] = {
            "id": self.id,
            "userId": self.user_id,
            "category": self.category.value,
            "entryType": self.entry_type.value,
            "title": self.title,
            "description": self.description,
            "entryFee": self.entry_fee,
            "stripeFee": self.stripe_fee,
            "totalAmount": self.total_amount,
            "paymentIntentId": self.payment_intent_id,
            "paymentStatus": self.payment_status.value,
            "status": self.status.value,
            "submissionDate": self.submission_date.isoformat(),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
        data.update(self.content.model_dump(by_alias=True, exclude={"entry_type"}))
        if isinstance(self.content, PitchDeckContent):
            data["fileUrl"] = file_url_for(self.payment_intent_id)
            if not include_file_data:
                data.pop("fileData", None)
        return data


@dataclass
class UploadedFile:
    """Fichier reçu en multipart, entièrement bufferisé en mémoire."""
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class EntrySubmission:
    """Champs bruts d'une soumission (formulaire multipart), avant validation."""
    user_id: Optional[str] = None
    category: Optional[str] = None
    entry_type: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    text_content: Optional[str] = None
    video_url: Optional[str] = None
    payment_intent_id: Optional[str] = None
