# medreminder/controllers/auth_controller.py
import time

from flask import current_app, request
from flask_jwt_extended import create_access_token, get_jwt, get_jwt_identity, jwt_required

from medreminder.errors import AuthProviderError, StoreError
from medreminder.helpers import api_response, get_identity, get_sessions, get_state_store
from medreminder.messages import auth_error_message, message
from medreminder.schedule import today_string

MIN_PASSWORD_LENGTH = 6

AUTH_ERROR_STATUS = {
    "auth/invalid-email": 400,
    "auth/user-disabled": 403,
    "auth/user-not-found": 401,
    "auth/wrong-password": 401,
    "auth/invalid-credential": 401,
    "auth/too-many-requests": 429,
    "auth/email-already-in-use": 409,
    "auth/weak-password": 400,
    "auth/operation-not-allowed": 403,
    "auth/network-request-failed": 503,
}


def _issue_token(user):
    return create_access_token(
        identity=user.uid,
        additional_claims={"email": user.email, "name": user.display_name},
    )


def _open_session(user_id):
    """Start the user's live subscriptions; a failure here only delays them."""
    try:
        get_sessions().open(user_id, today_string())
    except StoreError:
        current_app.logger.exception(f"Could not open dashboard session for {user_id}")


def _auth_failure(err, action):
    text = auth_error_message(err.code, err.message, action=action)
    return api_response(False, text, {"code": err.code}, AUTH_ERROR_STATUS.get(err.code, 400))


def signup():
    data = request.get_json(silent=True) or {}
    name = (data.get("name") or "").strip()
    email = (data.get("email") or "").strip()
    password = data.get("password") or ""
    confirm_password = data.get("confirmPassword") or data.get("confirm_password") or ""

    if not name:
        return api_response(False, message("signup/name-required"), status_code=400)
    if not email:
        return api_response(False, message("signup/email-required"), status_code=400)
    if len(password) < MIN_PASSWORD_LENGTH:
        return api_response(False, message("signup/password-too-short"), status_code=400)
    if password != confirm_password:
        return api_response(False, message("signup/password-mismatch"), status_code=400)

    try:
        user = get_identity().sign_up(email, password, name)
    except AuthProviderError as e:
        current_app.logger.info(f"Signup rejected for {email}: {e.code or e.message}")
        return _auth_failure(e, "signup")

    _open_session(user.uid)
    return api_response(True, message("session/signup-ok"), {
        "access_token": _issue_token(user),
        "user": user.to_dict(),
    }, 201)


def login():
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip()
    password = data.get("password") or ""

    if not email or not password:
        return api_response(False, message("login/fields-required"), status_code=400)

    try:
        user = get_identity().sign_in(email, password)
    except AuthProviderError as e:
        current_app.logger.info(f"Login rejected for {email}: {e.code or e.message}")
        return _auth_failure(e, "login")

    _open_session(user.uid)
    return api_response(True, message("session/login-ok"), {
        "access_token": _issue_token(user),
        "user": user.to_dict(),
    })


def firebase_login():
    """Exchange a Firebase ID token obtained by the client SDK for an app token."""
    data = request.get_json(silent=True) or {}
    id_token = (data.get("idToken") or "").strip()
    if not id_token:
        return api_response(False, message("auth/invalid-credential"), status_code=400)

    user = get_identity().verify_token(id_token)
    if not user:
        return api_response(False, message("auth/invalid-credential"), {"code": "auth/invalid-credential"}, 401)

    _open_session(user.uid)
    return api_response(True, message("session/login-ok"), {
        "access_token": _issue_token(user),
        "user": user.to_dict(),
    })


@jwt_required()
def logout():
    claims = get_jwt()
    user_id = get_jwt_identity()
    ttl = max(int(claims["exp"] - time.time()), 1)
    get_state_store().revoke(claims["jti"], ttl=ttl)
    get_sessions().close(user_id)
    return api_response(True, message("session/logout-ok"))


@jwt_required()
def me():
    claims = get_jwt()
    return api_response(True, "", {
        "uid": get_jwt_identity(),
        "email": claims.get("email"),
        "displayName": claims.get("name"),
    })
