from typing import Optional
from supabase import create_client, Client
from concours import config
from concours.errors import ServiceUnavailable

_supabase: Optional[Client] = None

def supabase_configured() -> bool:
    return bool(config.SUPABASE_URL and config.SUPABASE_KEY)

def supabase_initialized() -> bool:
    return _supabase is not None

def get_supabase() -> Client:
    """
    Client Supabase unique du process (créé à la première demande puis réutilisé).
    Soulève ServiceUnavailable (503) si SUPABASE_URL / clé manquent.
    """
    global _supabase
    if _supabase is None:
        if not supabase_configured():
            raise ServiceUnavailable("Service indisponible: SUPABASE_URL/SUPABASE_SERVICE_KEY manquants")
        _supabase = create_client(config.SUPABASE_URL, config.SUPABASE_KEY)
    return _supabase
