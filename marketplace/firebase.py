"""
Firebase Admin SDK bootstrap shared by token verification and push messaging
"""

import logging
from typing import Optional

import firebase_admin
from firebase_admin import credentials

from .config import FIREBASE_CLIENT_EMAIL, FIREBASE_PRIVATE_KEY, FIREBASE_PROJECT_ID

logger = logging.getLogger(__name__)


def has_service_account() -> bool:
    return bool(FIREBASE_PROJECT_ID and FIREBASE_CLIENT_EMAIL and FIREBASE_PRIVATE_KEY)


def get_firebase_app() -> Optional[firebase_admin.App]:
    """Return the default Firebase app, initializing it once"""
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    try:
        if has_service_account():
            cred = credentials.Certificate(
                {
                    "type": "service_account",
                    "project_id": FIREBASE_PROJECT_ID,
                    "client_email": FIREBASE_CLIENT_EMAIL,
                    "private_key": FIREBASE_PRIVATE_KEY,
                    "token_uri": "https://oauth2.googleapis.com/token",
                }
            )
            app = firebase_admin.initialize_app(cred, {"projectId": FIREBASE_PROJECT_ID})
            logger.info("Firebase Admin initialized with service account")
            return app

        if FIREBASE_PROJECT_ID:
            # Token verification only needs the project ID
            app = firebase_admin.initialize_app(options={"projectId": FIREBASE_PROJECT_ID})
            logger.info("Firebase Admin initialized with project ID only")
            return app
    except Exception as e:
        logger.error(f"❌ Error initializing Firebase Admin: {e}")
        return None

    logger.warning("⚠️ FIREBASE_PROJECT_ID not configured; Firebase disabled")
    return None
