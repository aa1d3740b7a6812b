# Module-level imports & constants
from locust import HttpUser, task, between
import os
import random
import uuid

CATEGORIES = ["business", "creative", "technology", "social-impact"]
ENTRY_TYPES = ["text", "pitch-deck", "video"]

"""
Charge sur les endpoints publics du backend concours.
- Lecture: /api/health, /api/entry-rules, /api/fees/{category}, /api/entries/{userId}
- Écriture: /api/create-payment-intent (désactivée par défaut: crée de vrais PaymentIntents en mode test)
Variables:
- LOCUST_USER_ID: utilisateur dont on liste les entrées (défaut: un id aléatoire par user virtuel)
- LOCUST_CREATE_INTENTS=1: active la création de PaymentIntents
"""

class ContestUser(HttpUser):
    wait_time = between(0.5, 2.0)

    def on_start(self):
        self.headers = {"Accept": "application/json"}
        self.user_id = os.getenv("LOCUST_USER_ID", "").strip() or f"load-{uuid.uuid4().hex[:8]}"
        self.create_intents = os.getenv("LOCUST_CREATE_INTENTS", "") == "1"

    @task(2)
    def health(self):
        self.client.get("/api/health", headers=self.headers, name="/api/health")

    @task(3)
    def entry_rules(self):
        self.client.get("/api/entry-rules", headers=self.headers, name="/api/entry-rules")

    @task(3)
    def fees(self):
        category = random.choice(CATEGORIES)
        self.client.get(f"/api/fees/{category}", headers=self.headers, name="/api/fees/[category]")

    @task(4)
    def list_entries(self):
        self.client.get(f"/api/entries/{self.user_id}", headers=self.headers, name="/api/entries/[userId]")

    @task(1)
    def create_payment_intent(self):
        if not self.create_intents:
            return
        payload = {"category": random.choice(CATEGORIES), "entryType": random.choice(ENTRY_TYPES)}
        with self.client.post(
            "/api/create-payment-intent",
            json=payload,
            headers=self.headers,
            name="/api/create-payment-intent",
            catch_response=True,
        ) as resp:
            # 429 attendu sous charge (rate limit 10/60s par IP)
            if resp.status_code in (200, 429):
                resp.success()
            else:
                resp.failure(f"status={resp.status_code}")
