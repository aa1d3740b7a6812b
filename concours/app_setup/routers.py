"""
Registre central des routers.
- API: entries, payments
- Health: health_router
"""
from fastapi import FastAPI
from concours.entries import views as entries_views
from concours.payments import views as payments_views
from concours.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    """
    Agrège tous les routers de l'application.
    L'ordre n'a pas d'impact sauf conflits de chemins (préfixe /api commun, chemins distincts).
    """
    app.include_router(entries_views.router)
    app.include_router(payments_views.router)
    # Health & monitoring
    app.include_router(health_router)
