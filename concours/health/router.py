from datetime import datetime, timezone
from fastapi import APIRouter, Request

from concours import config
from concours.entries.repository import get_entry_repository
from concours.errors import ServiceUnavailable
from concours.infra import supabase_client
from concours.payments import stripe_client
from concours.utils.rate_limit import rate_limit_health_info

router = APIRouter(prefix="/api", tags=["Health"])

def _store_info():
    info = {
        "configured": supabase_client.supabase_configured(),
        "initialized": supabase_client.supabase_initialized(),
        "table": config.ENTRIES_TABLE,
    }
    if not info["configured"]:
        return info
    try:
        info["check"] = get_entry_repository().check()
    except ServiceUnavailable as e:
        info["check"] = {"ok": False, "error": e.message}
    except Exception as e:
        # client Supabase non constructible (clé mal formée, etc.)
        info["check"] = {"ok": False, "error": str(e)}
    info["initialized"] = supabase_client.supabase_initialized()
    return info

@router.get("/health")
def health(request: Request):
    """État du service; ne lève jamais (les sondes en échec sont rapportées dans le body)."""
    return {
        "status": "OK",
        "environment": config.APP_ENV,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "supabase": _store_info(),
        "stripe": {"initialized": stripe_client.stripe_ready(), "webhook": bool(config.STRIPE_WEBHOOK_SECRET)},
        "rate_limit": rate_limit_health_info(request),
    }
