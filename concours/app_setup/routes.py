"""
Routes simples (hors routers).
- /: bannière JSON du service (environnement, horodatage, carte des endpoints).
- /favicon.ico: pas de contenu (204) pour éviter des 404 dans les logs.
"""
from datetime import datetime, timezone
from fastapi import FastAPI
from fastapi.responses import Response
from starlette.status import HTTP_204_NO_CONTENT
from concours.config import APP_ENV, ENABLE_DEV_ROUTES

ENDPOINTS = {
    "health": "GET /api/health",
    "entryRules": "GET /api/entry-rules",
    "fees": "GET /api/fees/:category",
    "createPaymentIntent": "POST /api/create-payment-intent",
    "submitEntry": "POST /api/entries",
    "listEntries": "GET /api/entries/:userId",
    "downloadFile": "GET /api/file/:paymentIntentId",
    "deleteEntry": "DELETE /api/entries/:entryId",
    "webhook": "POST /api/webhook",
}

def register_routes(app: FastAPI) -> None:
    @app.get("/", include_in_schema=False)
    def root():
        endpoints = dict(ENDPOINTS)
        if ENABLE_DEV_ROUTES:
            endpoints["createTestEntry"] = "GET /api/create-test-entry/:userId"
        return {
            "message": "API du concours en ligne",
            "status": "running",
            "environment": APP_ENV,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "endpoints": endpoints,
        }

    @app.get("/favicon.ico", include_in_schema=False)
    async def favicon():
        return Response(status_code=HTTP_204_NO_CONTENT)
