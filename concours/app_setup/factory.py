"""
Factory d'application pour les entrypoints (concours.app, concours.asgi).
Ordonne les étapes d'initialisation de manière lisible et testable.
"""
from fastapi import FastAPI
from .lifespan import lifespan
from .middlewares import (
    register_basic_middlewares,
    register_force_https_middleware,
    register_path_normalization_middleware,
    register_security_middleware,
)
from .exceptions import register_exception_handlers
from .routes import register_routes
from .routers import register_routers

def create_app() -> FastAPI:
    """
    Construit l'app FastAPI avec le lifespan et enregistre:
      1) middlewares de base (CORS, TrustedHost, ProxyHeaders)
      2) en-têtes de sécurité + CSP, normalisation des chemins
      3) gestionnaires d'exceptions, routes simples et routers (entries, payments, health)
      4) redirection HTTPS, ajoutée en dernier pour s'exécuter en premier
    """
    app = FastAPI(title="Concours API", lifespan=lifespan)
    register_basic_middlewares(app)
    register_security_middleware(app)
    register_path_normalization_middleware(app)
    register_exception_handlers(app)
    register_routes(app)
    register_routers(app)
    register_force_https_middleware(app)
    return app
