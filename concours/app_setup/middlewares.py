import re
from fastapi import Request, FastAPI
from fastapi.responses import RedirectResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware
try:
    from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware
except ImportError:
    ProxyHeadersMiddleware = None
from concours.config import SUPABASE_URL, COOKIE_SECURE, CORS_ORIGINS, ALLOWED_HOSTS

"""
Middlewares transverses de l'application.
- register_basic_middlewares: CORS, TrustedHost et confiance en X-Forwarded-*.
- register_path_normalization_middleware: //api//entries -> /api/entries.
- register_security_middleware: en-têtes de sécurité et CSP (Stripe.js autorisé).
- register_force_https_middleware: force la redirection HTTPS (utile derrière proxy).
Notes:
- L'ordre d'ajout est important: le middleware HTTPS est ajouté en dernier pour s'exécuter en premier.
"""

_REPEATED_SLASHES = re.compile(r"/{2,}")

STRIPE_SCRIPT_SOURCES = ["https://js.stripe.com"]
STRIPE_CONNECT_SOURCES = ["https://api.stripe.com"]
STRIPE_FRAME_SOURCES = ["https://js.stripe.com", "https://hooks.stripe.com"]
SWAGGER_CDNS = ["https://cdn.jsdelivr.net"]

def register_basic_middlewares(app: FastAPI) -> None:
    """
    Ajoute les middlewares « de base »:
    - CORSMiddleware: autorise les origines définies (dev/prod).
    - TrustedHostMiddleware: limite les hôtes acceptés (défense host header).
    - ProxyHeadersMiddleware (si dispo): fait confiance aux en-têtes du proxy (x-forwarded-*).
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        # credentials interdits avec l'origine joker
        allow_credentials="*" not in CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=ALLOWED_HOSTS + ["*"] if "*" in CORS_ORIGINS else ALLOWED_HOSTS,
    )
    # Fait confiance aux en-têtes X-Forwarded-* (Vercel, Nginx, etc.)
    if ProxyHeadersMiddleware:
        app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=["*"])

def register_path_normalization_middleware(app: FastAPI) -> None:
    """
    Fusionne les slashs répétés du chemin avant le routage.
    Ex: un front qui concatène une base terminée par '/' produit //api/entries.
    """
    @app.middleware("http")
    async def normalize_path(request: Request, call_next):
        path = request.scope.get("path") or "/"
        if "//" in path:
            normalized = _REPEATED_SLASHES.sub("/", path)
            request.scope["path"] = normalized
            request.scope["raw_path"] = normalized.encode("utf-8")
        return await call_next(request)

def register_security_middleware(app: FastAPI) -> None:
    """
    En-têtes de sécurité sur toutes les réponses:
    - X-Frame-Options, X-Content-Type-Options, Referrer-Policy, Permissions-Policy, HSTS (si secure).
    - CSP: restreint script/connect/frame, autorise Stripe.js et l'API Stripe, plus le CDN de la doc Swagger.
    """
    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        if "X-Frame-Options" not in response.headers:
            response.headers["X-Frame-Options"] = "DENY"
        if "X-Content-Type-Options" not in response.headers:
            response.headers["X-Content-Type-Options"] = "nosniff"
        if "Referrer-Policy" not in response.headers:
            response.headers["Referrer-Policy"] = "no-referrer"
        if "Permissions-Policy" not in response.headers:
            response.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=(), payment=(self \"https://js.stripe.com\")"
        if COOKIE_SECURE and "Strict-Transport-Security" not in response.headers:
            response.headers["Strict-Transport-Security"] = "max-age=63072000; includeSubDomains; preload"

        csp_connect = ["'self'"] + STRIPE_CONNECT_SOURCES
        if SUPABASE_URL:
            csp_connect.append(SUPABASE_URL.rstrip("/"))

        csp = (
            "default-src 'self'; "
            "base-uri 'self'; object-src 'none'; frame-ancestors 'none'; "
            "img-src 'self' data: blob: https://*.stripe.com https://fastapi.tiangolo.com; "
            f"style-src 'self' 'unsafe-inline' {' '.join(SWAGGER_CDNS)}; "
            f"script-src 'self' 'unsafe-inline' {' '.join(STRIPE_SCRIPT_SOURCES + SWAGGER_CDNS)}; "
            f"frame-src {' '.join(STRIPE_FRAME_SOURCES)}; "
            f"connect-src {' '.join(csp_connect)}"
        )
        response.headers["Content-Security-Policy"] = csp
        return response

def register_force_https_middleware(app: FastAPI) -> None:
    """
    Force la redirection HTTP -> HTTPS lorsqu'un proxy place x-forwarded-proto=http.
    - Ajouté en dernier afin qu'il s'exécute en premier dans la pile des middlewares.
    - Les webhooks Stripe sont exemptés: une redirection ferait perdre le POST.
    """
    @app.middleware("http")
    async def force_https(request: Request, call_next):
        if request.headers.get("x-forwarded-proto") == "http" and not request.url.path.endswith("/webhook"):
            url = str(request.url.replace(scheme="https"))
            return RedirectResponse(url, status_code=301)
        return await call_next(request)
