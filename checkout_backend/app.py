# module checkout_backend.app
from checkout_backend.app_setup.factory import create_app

# App globale (configuration lue depuis l'environnement / .env)
app = create_app()
