# concours.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=False)

"""
Configuration centrale du backend concours.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose les secrets/URLs (Supabase, Stripe), CORS/hosts
- Expose les limites métier partagées entre validation et guidage client (taille d'upload)
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _flag(name: str, default: str = "") -> bool:
    return _clean_env(os.getenv(name, default)).lower() in ("1", "true", "yes")

# Supabase: URL et clés
# - SUPABASE_URL peut parfois être sans schéma: on préfixe en https:// si nécessaire
# - Le backend écrit les entrées côté serveur: la clé service est préférée à la clé anon
SUPABASE_URL = _clean_env(os.getenv("SUPABASE_URL") or "")
SUPABASE_KEY = _clean_env(
    os.getenv("SUPABASE_SERVICE_KEY") or os.getenv("SUPABASE_KEY") or os.getenv("SUPABASE_ANON_KEY") or ""
)

if SUPABASE_URL and not SUPABASE_URL.startswith("http"):
    SUPABASE_URL = "https://" + SUPABASE_URL
if SUPABASE_URL.endswith("/"):
    SUPABASE_URL = SUPABASE_URL.rstrip("/")

ENTRIES_TABLE = _clean_env(os.getenv("ENTRIES_TABLE") or "entries")

# Stripe: clés et secret webhook
STRIPE_SECRET_KEY = _clean_env(os.getenv("STRIPE_SECRET_KEY") or "")
STRIPE_WEBHOOK_SECRET = _clean_env(os.getenv("STRIPE_WEBHOOK_SECRET") or "")
PAYMENT_CURRENCY = _clean_env(os.getenv("PAYMENT_CURRENCY") or "usd").lower()

# Limite unique d'upload (Mo): appliquée par le lecteur multipart, le validateur et /api/entry-rules
MAX_UPLOAD_MB = int(_clean_env(os.getenv("MAX_UPLOAD_MB") or "4"))
MAX_UPLOAD_BYTES = MAX_UPLOAD_MB * 1024 * 1024

# Sécurité / CORS
COOKIE_SECURE = _flag("COOKIE_SECURE", "false")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1").split(",") if h.strip()]

# Routes de développement (création d'une entrée de démonstration)
ENABLE_DEV_ROUTES = _flag("ENABLE_DEV_ROUTES")

# Libellé d'environnement (serverless sur Vercel, sinon APP_ENV ou "local")
if os.getenv("VERCEL") or os.getenv("VERCEL_ENV"):
    APP_ENV = "serverless"
else:
    APP_ENV = _clean_env(os.getenv("APP_ENV") or "local")
