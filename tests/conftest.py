import os

# Environnement de test figé avant l'import de l'app (concours.config lit l'env à l'import)
os.environ["DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS"] = "1"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_dummy"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test_secret"
os.environ["CORS_ORIGINS"] = "*"
os.environ["ENABLE_DEV_ROUTES"] = "1"
for _key in ("SUPABASE_URL", "SUPABASE_SERVICE_KEY", "SUPABASE_KEY", "SUPABASE_ANON_KEY", "LOCAL_RATE_LIMIT_FALLBACK"):
    os.environ[_key] = ""

import itertools
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Generator, List, Optional

import pytest
from fastapi.testclient import TestClient

from concours.app import app as fastapi_app
from concours.entries.models import Entry, PaymentStatus
from concours.entries.repository import EntryRepository, get_entry_repository
from concours.errors import PaymentLookupError, PersistenceError
from concours.payments import stripe_client

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)
        elif "tests/functional/" in nodeid:
            item.add_marker(pytest.mark.functional)


class InMemoryEntryRepository(EntryRepository):
    """
    Repository en mémoire: stocke les lignes plates (to_row) comme la table Supabase,
    avec id uuid, created_at croissant et unicité de payment_intent_id.
    """

    def __init__(self):
        super().__init__(client=None, table="entries")
        self.rows: Dict[str, Dict[str, Any]] = {}
        self._clock = itertools.count()
        self.insert_calls = 0

    def insert(self, entry: Entry) -> Entry:
        self.insert_calls += 1
        row = entry.to_row()
        if any(r["payment_intent_id"] == row["payment_intent_id"] for r in self.rows.values()):
            raise PersistenceError("duplicate key value violates unique constraint")
        row["id"] = str(uuid.uuid4())
        row["created_at"] = (datetime(2025, 1, 1, tzinfo=timezone.utc) + timedelta(seconds=next(self._clock))).isoformat()
        self.rows[row["id"]] = row
        return Entry.from_row(row)

    def list_by_user(self, user_id: str) -> List[Entry]:
        rows = [r for r in self.rows.values() if r["user_id"] == user_id]
        rows.sort(key=lambda r: r["created_at"], reverse=True)
        return [Entry.from_row(r) for r in rows]

    def _find_one(self, column: str, value: str) -> Optional[Entry]:
        for row in self.rows.values():
            if row.get(column) == value:
                return Entry.from_row(row)
        return None

    def delete(self, entry_id: str) -> None:
        self.rows.pop(entry_id, None)

    def mark_payment_failed(self, payment_intent_id: str) -> int:
        updated = 0
        for row in self.rows.values():
            if row["payment_intent_id"] == payment_intent_id:
                row["payment_status"] = PaymentStatus.failed.value
                updated += 1
        return updated

    def check(self) -> Dict[str, Any]:
        return {"ok": True, "rows": min(len(self.rows), 1)}


class FakeStripe:
    """PaymentIntents simulés; les tests font passer un intent en 'succeeded' via succeed()."""

    def __init__(self):
        self.intents: Dict[str, Dict[str, Any]] = {}
        self._ids = itertools.count(1)

    def create_payment_intent(self, *, amount: int, currency: str, metadata: Dict[str, str]) -> Dict[str, Any]:
        pi_id = f"pi_fake_{next(self._ids)}"
        intent = {
            "id": pi_id,
            "client_secret": f"{pi_id}_secret_abc",
            "amount": amount,
            "currency": currency,
            "status": "requires_payment_method",
            "metadata": dict(metadata),
        }
        self.intents[pi_id] = intent
        return dict(intent)

    def retrieve_payment_intent(self, payment_intent_id: str) -> Dict[str, Any]:
        if payment_intent_id not in self.intents:
            raise PaymentLookupError(payment_intent_id)
        return dict(self.intents[payment_intent_id])

    def succeed(self, payment_intent_id: str) -> None:
        self.intents[payment_intent_id]["status"] = "succeeded"

    def add(self, payment_intent_id: str, *, status: str = "succeeded", metadata: Optional[Dict[str, str]] = None):
        self.intents[payment_intent_id] = {
            "id": payment_intent_id,
            "client_secret": f"{payment_intent_id}_secret",
            "status": status,
            "metadata": metadata or {},
        }
        return self.intents[payment_intent_id]


@pytest.fixture(scope="session")
def app():
    return fastapi_app

@pytest.fixture()
def repository(app) -> Generator[InMemoryEntryRepository, None, None]:
    repo = InMemoryEntryRepository()
    app.dependency_overrides[get_entry_repository] = lambda: repo
    try:
        yield repo
    finally:
        app.dependency_overrides.pop(get_entry_repository, None)

# Mocks Stripe: aucun appel réseau, les services passent par le module stripe_client patché
@pytest.fixture()
def fake_stripe(monkeypatch) -> FakeStripe:
    fake = FakeStripe()
    monkeypatch.setattr(stripe_client, "create_payment_intent", fake.create_payment_intent, raising=True)
    monkeypatch.setattr(stripe_client, "retrieve_payment_intent", fake.retrieve_payment_intent, raising=True)
    return fake

@pytest.fixture()
def client(app, repository, fake_stripe) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c

@pytest.fixture()
def paid_intent(fake_stripe):
    """Fabrique un PaymentIntent payé dont les metadata correspondent à la catégorie."""
    from concours.payments.fees import fees_for_category
    from concours.payments.metadata import make_metadata

    def _make(category: str = "technology", entry_type: str = "text", status: str = "succeeded") -> str:
        pi_id = f"pi_paid_{uuid.uuid4().hex[:12]}"
        fake_stripe.add(pi_id, status=status, metadata=make_metadata(category, entry_type, fees_for_category(category)))
        return pi_id
    return _make