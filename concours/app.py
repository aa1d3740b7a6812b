# module concours.app
from concours.app_setup.factory import create_app

# App globale
app = create_app()
