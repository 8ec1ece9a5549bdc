"""
Registre central des routers.
- Storefront: payments (checkout, session, webhook)
- API: marketing (/api/klaviyo)
- Health: health_router
"""
from fastapi import FastAPI
from checkout_backend.payments import views as payments_views
from checkout_backend.marketing import views as marketing_views
from checkout_backend.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    """
    Agrège tous les routers de l'application.
    - L'ordre n'a pas d'impact sauf conflits de chemins (évités par préfixes).
    """
    app.include_router(payments_views.router)
    app.include_router(marketing_views.router)
    # Health & monitoring
    app.include_router(health_router)
