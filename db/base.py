import logging

import firebase_admin
from firebase_admin import credentials, firestore_async

from shared.config import Settings, get_settings

logger = logging.getLogger(__name__)

_APP_NAME = "event-agent"


def create_db(settings: Settings | None = None):
    """
    Build an async Firestore client from the service-account file.
    Called once by the host process; the client is then passed into the
    stores explicitly.
    """
    settings = settings or get_settings()
    try:
        app = firebase_admin.get_app(_APP_NAME)
    except ValueError:
        cred = credentials.Certificate(settings.firebase_credentials)
        app = firebase_admin.initialize_app(cred, name=_APP_NAME)
        logger.info("[DB] Initialized Firebase app from %s", settings.firebase_credentials)
    return firestore_async.client(app)
