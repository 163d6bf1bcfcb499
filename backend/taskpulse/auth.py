"""
Firebase authentication for FastAPI.

Verifies Firebase ID tokens and extracts user information. The verified uid
is the owner identity every task query is scoped by.
"""

import os
from pathlib import Path
import firebase_admin
from firebase_admin import auth, credentials, exceptions as firebase_exceptions
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from taskpulse.exceptions import NotAuthenticatedError
from taskpulse.logging_config import get_logger

logger = get_logger(__name__)


def _init_firebase() -> None:
    """Initialize the Firebase Admin SDK once, on first token verification."""
    try:
        firebase_admin.get_app()
        return  # Already initialized
    except ValueError:
        pass  # Need to initialize

    # __file__ = backend/taskpulse/auth.py -> .parent.parent = backend/
    backend_dir = Path(__file__).parent.parent

    possible_paths = [
        backend_dir / "serviceAccountKey.json",
        backend_dir / "firebase-service-account.json",
    ]

    # Firebase's default naming pattern: *-firebase-adminsdk-*.json
    possible_paths.extend(backend_dir.glob("*-firebase-adminsdk-*.json"))

    env_path = os.environ.get("GOOGLE_APPLICATION_CREDENTIALS", "")
    if env_path:
        possible_paths.append(Path(env_path))

    for key_path in possible_paths:
        if key_path.exists() and key_path.is_file():
            cred = credentials.Certificate(str(key_path))
            firebase_admin.initialize_app(cred)
            logger.info(f"Firebase Admin SDK initialized with: {key_path.name}")
            return

    logger.warning("No Firebase service account key found! Token verification may fail.")
    logger.warning("Download from: Firebase Console > Project Settings > Service Accounts")
    firebase_admin.initialize_app()
    logger.info("Firebase Admin SDK initialized without credentials")


class AuthenticatedUser:
    """Represents an authenticated user from Firebase."""

    def __init__(self, uid: str, email: str | None = None, name: str | None = None):
        self.uid = uid
        self.email = email
        self.name = name

    def __repr__(self):
        return f"AuthenticatedUser(uid={self.uid}, email={self.email})"


def verify_token(token: str) -> AuthenticatedUser:
    """
    Verify a Firebase ID token.

    Raises:
        NotAuthenticatedError: If the token is invalid or expired.
    """
    _init_firebase()
    try:
        decoded_token = auth.verify_id_token(token)
    except auth.ExpiredIdTokenError:
        logger.warning("Expired Firebase token")
        raise NotAuthenticatedError("Token has expired")
    except auth.InvalidIdTokenError:
        logger.warning("Invalid Firebase token")
        raise NotAuthenticatedError("Invalid authentication token")
    except (ValueError, firebase_exceptions.FirebaseError) as e:
        logger.error(f"Authentication error: {e}")
        raise NotAuthenticatedError("Authentication failed")

    user = AuthenticatedUser(
        uid=decoded_token["uid"],
        email=decoded_token.get("email"),
        name=decoded_token.get("name"),
    )
    logger.debug(f"Authenticated user: {user.uid} ({user.email})")
    return user


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(HTTPBearer(auto_error=False)),
) -> AuthenticatedUser:
    """
    Resolve the current user identity.

    A missing bearer token is reported the same way as a bad one, so clients
    get a single 401 path to the sign-in flow.
    """
    if not credentials:
        raise NotAuthenticatedError()
    return verify_token(credentials.credentials)
