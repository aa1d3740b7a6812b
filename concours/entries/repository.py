"""
Accès aux données pour la feature 'entries' (table Supabase `entries`).
- Un EntryRepository enveloppe le client Supabase unique du process; il est injecté
  dans les vues via get_entry_repository() (dépendance FastAPI).
- Toute erreur Supabase/PostgREST est journalisée puis remontée en PersistenceError.
"""
import logging
from typing import Any, Dict, List, Optional

from postgrest.exceptions import APIError

from concours import config
from concours.errors import PersistenceError
from concours.entries.models import Entry, PaymentStatus
from concours.infra import supabase_client

logger = logging.getLogger(__name__)

# Colonnes renvoyées par le listing: jamais file_data (payload base64)
LIST_COLUMNS = (
    "id, user_id, category, entry_type, title, description, text_content, "
    "file_name, file_type, file_size, video_url, entry_fee, stripe_fee, total_amount, "
    "payment_intent_id, payment_status, status, submission_date, created_at"
)

# Code Postgres: syntaxe invalide (ex: id non-uuid)
_INVALID_TEXT_REPRESENTATION = "22P02"

# module concours.entries.repository
class EntryRepository:
    def __init__(self, client, table: str = "entries"):
        self.client = client
        self.table = table

    def _table(self):
        return self.client.table(self.table)

    def insert(self, entry: Entry) -> Entry:
        """Insère l'entrée et retourne la version persistée (id, created_at)."""
        try:
            res = self._table().insert(entry.to_row()).execute()
        except Exception as e:
            logger.exception("entries.repository.insert failed payment_intent_id=%s", entry.payment_intent_id)
            raise PersistenceError(f"Échec de l'enregistrement de l'entrée: {e}")
        rows = res.data or []
        if not rows:
            raise PersistenceError("Échec de l'enregistrement de l'entrée: aucune ligne retournée")
        return Entry.from_row(rows[0])

    def list_by_user(self, user_id: str) -> List[Entry]:
        """Entrées d'un utilisateur, les plus récentes d'abord (file_data exclu)."""
        try:
            res = (
                self._table()
                .select(LIST_COLUMNS)
                .eq("user_id", user_id)
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as e:
            logger.exception("entries.repository.list_by_user failed user_id=%s", user_id)
            raise PersistenceError(f"Échec de la lecture des entrées: {e}")
        return [Entry.from_row(row) for row in res.data or []]

    def get(self, entry_id: str) -> Optional[Entry]:
        return self._find_one("id", entry_id)

    def get_by_payment_intent(self, payment_intent_id: str) -> Optional[Entry]:
        return self._find_one("payment_intent_id", payment_intent_id)

    def _find_one(self, column: str, value: str) -> Optional[Entry]:
        try:
            res = self._table().select("*").eq(column, value).limit(1).execute()
        except APIError as e:
            if getattr(e, "code", None) == _INVALID_TEXT_REPRESENTATION:
                return None
            logger.exception("entries.repository._find_one failed %s=%s", column, value)
            raise PersistenceError(f"Échec de la lecture de l'entrée: {e}")
        except Exception as e:
            logger.exception("entries.repository._find_one failed %s=%s", column, value)
            raise PersistenceError(f"Échec de la lecture de l'entrée: {e}")
        rows = res.data or []
        return Entry.from_row(rows[0]) if rows else None

    def delete(self, entry_id: str) -> None:
        try:
            self._table().delete().eq("id", entry_id).execute()
        except Exception as e:
            logger.exception("entries.repository.delete failed id=%s", entry_id)
            raise PersistenceError(f"Échec de la suppression de l'entrée: {e}")

    def mark_payment_failed(self, payment_intent_id: str) -> int:
        """Passe payment_status à 'failed'; retourne le nombre de lignes touchées (0 si inconnu)."""
        try:
            res = (
                self._table()
                .update({"payment_status": PaymentStatus.failed.value})
                .eq("payment_intent_id", payment_intent_id)
                .execute()
            )
        except Exception as e:
            logger.exception("entries.repository.mark_payment_failed failed payment_intent_id=%s", payment_intent_id)
            raise PersistenceError(f"Échec de la mise à jour du paiement: {e}")
        return len(res.data or [])

    def check(self) -> Dict[str, Any]:
        """Sonde de santé: lecture d'une ligne."""
        try:
            res = self._table().select("id").limit(1).execute()
            return {"ok": True, "rows": len(res.data or [])}
        except Exception as e:
            return {"ok": False, "error": str(e)}


_repository: Optional[EntryRepository] = None

def get_entry_repository() -> EntryRepository:
    """
    Dépendance FastAPI: repository unique du process.
    - Vérifie la disponibilité du store (ServiceUnavailable sinon).
    - Surchargée en tests via app.dependency_overrides.
    """
    global _repository
    if _repository is None:
        _repository = EntryRepository(supabase_client.get_supabase(), table=config.ENTRIES_TABLE)
    return _repository
