"""
WSGI entry point. Also starts the background reaper for the default store
unless ``PASTES["REAPER_AUTOSTART"]`` is off.
"""

import os

from django.apps import apps
from django.core.wsgi import get_wsgi_application

from pastes.conf import get_setting

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "pastebin.settings")

application = get_wsgi_application()

reaper = None
if get_setting("REAPER_AUTOSTART"):
    reaper = apps.get_app_config("pastes").make_reaper()
    reaper.start()
