# iceonwheels/services/firebase.py
from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Optional

import firebase_admin
from firebase_admin import credentials, firestore

from ..settings import settings

logger = logging.getLogger(__name__)


def _credentials() -> Optional[credentials.Certificate]:
    """Service-account certificate if one is on disk; None selects ADC."""
    path = settings.google_application_credentials or os.environ.get("GOOGLE_APPLICATION_CREDENTIALS")
    if path and os.path.isfile(path):
        return credentials.Certificate(path)
    logger.info("no service account file, using application default credentials")
    return None


@lru_cache
def ensure_firestore() -> firestore.Client:
    """Firestore client bound to the default Firebase app, created on first use."""
    try:
        app = firebase_admin.get_app()
    except ValueError:
        app = firebase_admin.initialize_app(
            _credentials(), {"projectId": settings.firebase_project_id}
        )
        logger.info("firebase app initialized for project %s", settings.firebase_project_id)
    return firestore.client(app)
