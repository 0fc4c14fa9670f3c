import logging
from dataclasses import dataclass
from typing import Optional

import requests

from medreminder.errors import AuthProviderError
from medreminder.services import firebase_service

logger = logging.getLogger(__name__)

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1/accounts:{action}"

# Identity Toolkit REST error messages -> stable client SDK codes
PROVIDER_ERROR_CODES = {
    "INVALID_EMAIL": "auth/invalid-email",
    "MISSING_EMAIL": "auth/invalid-email",
    "USER_DISABLED": "auth/user-disabled",
    "EMAIL_NOT_FOUND": "auth/user-not-found",
    "INVALID_PASSWORD": "auth/wrong-password",
    "INVALID_LOGIN_CREDENTIALS": "auth/invalid-credential",
    "INVALID_IDP_RESPONSE": "auth/invalid-credential",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "auth/too-many-requests",
    "EMAIL_EXISTS": "auth/email-already-in-use",
    "WEAK_PASSWORD": "auth/weak-password",
    "OPERATION_NOT_ALLOWED": "auth/operation-not-allowed",
    "PASSWORD_LOGIN_DISABLED": "auth/operation-not-allowed",
}


@dataclass
class AuthUser:
    uid: str
    email: str
    display_name: Optional[str] = None
    id_token: Optional[str] = None

    def to_dict(self):
        return {"uid": self.uid, "email": self.email, "displayName": self.display_name}


def provider_error_code(raw_message):
    """'WEAK_PASSWORD : Password should be ...' -> 'auth/weak-password'"""
    head = (raw_message or "").split(":", 1)[0].strip()
    return PROVIDER_ERROR_CODES.get(head)


class FirebaseIdentity:
    """Email/password accounts on Firebase Authentication."""

    def __init__(self, api_key, cred_path=None, timeout=10):
        self.api_key = api_key
        self.cred_path = cred_path
        self.timeout = timeout

    def _post(self, action, payload):
        url = IDENTITY_TOOLKIT_URL.format(action=action)
        try:
            response = requests.post(url, params={"key": self.api_key}, json=payload, timeout=self.timeout)
        except (requests.ConnectionError, requests.Timeout) as e:
            logger.warning("Identity Toolkit %s unreachable: %s", action, e)
            raise AuthProviderError("auth/network-request-failed", str(e)) from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code != 200:
            raw = (body.get("error") or {}).get("message") or response.text
            code = provider_error_code(raw)
            logger.warning("Identity Toolkit %s failed: %s", action, raw)
            raise AuthProviderError(code, raw)
        return body

    def sign_up(self, email, password, display_name):
        body = self._post("signUp", {
            "email": email,
            "password": password,
            "returnSecureToken": True,
        })
        self._post("update", {
            "idToken": body["idToken"],
            "displayName": display_name,
            "returnSecureToken": False,
        })
        return AuthUser(
            uid=body["localId"],
            email=body.get("email", email),
            display_name=display_name,
            id_token=body["idToken"],
        )

    def sign_in(self, email, password):
        body = self._post("signInWithPassword", {
            "email": email,
            "password": password,
            "returnSecureToken": True,
        })
        return AuthUser(
            uid=body["localId"],
            email=body.get("email", email),
            display_name=body.get("displayName") or None,
            id_token=body.get("idToken"),
        )

    def verify_token(self, id_token):
        if self.cred_path:
            firebase_service.init_firebase(self.cred_path)
        decoded = firebase_service.verify_id_token(id_token)
        if not decoded:
            return None
        return AuthUser(
            uid=decoded["uid"],
            email=decoded.get("email", ""),
            display_name=decoded.get("name"),
            id_token=id_token,
        )
