"""WSGI config for the recordsdesk project."""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'recordsdesk.settings')

application = get_wsgi_application()
