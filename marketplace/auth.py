import logging

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from firebase_admin import auth as firebase_auth
from sqlalchemy.orm import Session

from .database import get_db
from .firebase import get_firebase_app
from .models import User

logger = logging.getLogger(__name__)

security = HTTPBearer()


def verify_firebase_token(token: str) -> dict:
    """Verify a Firebase ID token and return its decoded claims"""
    app = get_firebase_app()
    if app is None:
        logger.error("❌ Firebase not configured")
        raise HTTPException(status_code=500, detail="Firebase not configured")

    try:
        return firebase_auth.verify_id_token(token, app=app)
    except firebase_auth.ExpiredIdTokenError as e:
        raise HTTPException(status_code=401, detail="Token expired") from e
    except (ValueError, firebase_auth.InvalidIdTokenError) as e:
        logger.warning(f"⚠️ Invalid Firebase token: {e}")
        raise HTTPException(status_code=401, detail="Invalid token") from e


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    claims = verify_firebase_token(credentials.credentials)
    firebase_uid = claims.get("uid") or claims.get("sub")
    if not firebase_uid:
        raise HTTPException(status_code=401, detail="Invalid token payload")

    user = db.query(User).filter(User.firebase_uid == firebase_uid).first()
    if not user:
        logger.warning(f"⚠️ No user registered for Firebase UID {firebase_uid}")
        raise HTTPException(status_code=401, detail="User not found")

    logger.debug(f"✅ User authenticated: {user.email}")
    return user
