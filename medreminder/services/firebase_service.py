import logging

import firebase_admin
from firebase_admin import auth, credentials, firestore

logger = logging.getLogger(__name__)


def init_firebase(cred_path):
    """Initialize Firebase Admin only once per process."""
    if not firebase_admin._apps:
        cred = credentials.Certificate(cred_path)
        firebase_admin.initialize_app(cred)
        logger.info("Firebase Admin initialized from %s", cred_path)
    return firebase_admin.get_app()


def firestore_client(cred_path):
    init_firebase(cred_path)
    return firestore.client()


# Token verification function
def verify_id_token(token):
    try:
        decoded_token = auth.verify_id_token(token)
        return decoded_token
    except (ValueError, auth.InvalidIdTokenError, auth.ExpiredIdTokenError,
            auth.RevokedIdTokenError, auth.CertificateFetchError) as e:
        logger.warning("Rejected Firebase ID token: %s", e)
        return None
