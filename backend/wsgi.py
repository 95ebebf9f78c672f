# backend/wsgi.py
from dronemart import create_app

app = create_app()
