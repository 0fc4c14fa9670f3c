# medreminder/__init__.py
import atexit
import os
from datetime import timedelta

from dotenv import load_dotenv
from flask import Flask, jsonify

from .extensions import cors, jwt
from .helpers import get_state_store
from .messages import message
from .services.dashboard_session import SessionRegistry
from .utils.state_store import StateStore

load_dotenv()


def _origins(value):
    return [o.strip() for o in value.split(",") if o.strip()]


def create_app(test_config=None, store=None, identity=None):
    app = Flask(__name__)

    app.config['JWT_SECRET_KEY'] = os.getenv('JWT_SECRET_KEY', 'super-secret')
    app.config['JWT_ACCESS_TOKEN_EXPIRES'] = timedelta(hours=int(os.getenv('JWT_ACCESS_TOKEN_HOURS', '12')))
    app.config['FIREBASE_CREDENTIALS_PATH'] = os.getenv("FIREBASE_CREDENTIALS_PATH", "firebase/firebase-adminsdk.json")
    app.config['FIREBASE_WEB_API_KEY'] = os.getenv("FIREBASE_WEB_API_KEY")
    app.config['IDENTITY_TIMEOUT_SECONDS'] = float(os.getenv("IDENTITY_TIMEOUT_SECONDS", "10"))
    app.config['FRONTEND_URL'] = os.getenv("FRONTEND_URL", "http://localhost:5173")
    app.config['REDIS_URL'] = os.getenv("REDIS_URL")
    app.config['MESSAGES_LOCALE'] = os.getenv("MESSAGES_LOCALE", "en")
    app.config['SNAPSHOT_WAIT_SECONDS'] = float(os.getenv("SNAPSHOT_WAIT_SECONDS", "5"))
    app.config['STREAM_REFRESH_SECONDS'] = float(os.getenv("STREAM_REFRESH_SECONDS", "60"))
    app.config['LOG_LEVEL'] = os.getenv("LOG_LEVEL", "INFO")

    if test_config:
        app.config.update(test_config)

    app.logger.setLevel(app.config['LOG_LEVEL'])

    jwt.init_app(app)
    cors.init_app(
        app,
        origins=_origins(app.config['FRONTEND_URL']),
        supports_credentials=True,
        methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
    )

    if store is None:
        from .services.firebase_service import firestore_client
        from .services.firestore_store import FirestoreStore
        store = FirestoreStore(firestore_client(app.config['FIREBASE_CREDENTIALS_PATH']))

    if identity is None:
        from .services.identity_service import FirebaseIdentity
        identity = FirebaseIdentity(
            app.config['FIREBASE_WEB_API_KEY'],
            cred_path=app.config['FIREBASE_CREDENTIALS_PATH'],
            timeout=app.config['IDENTITY_TIMEOUT_SECONDS'],
        )

    sessions = SessionRegistry(store)
    state = StateStore(
        redis_url=app.config['REDIS_URL'],
        default_ttl_secs=int(app.config['JWT_ACCESS_TOKEN_EXPIRES'].total_seconds()),
    )
    app.extensions["medreminder.store"] = store
    app.extensions["medreminder.identity"] = identity
    app.extensions["medreminder.sessions"] = sessions
    app.extensions["medreminder.state"] = state
    atexit.register(sessions.close_all)

    @app.errorhandler(Exception)
    def handle_error(e):
        from werkzeug.exceptions import HTTPException
        if isinstance(e, HTTPException):
            return jsonify(success=False, message=e.description, data=None), e.code
        app.logger.exception("Unhandled error")
        return jsonify(success=False, message=message("generic/error"), data=None), 500

    @jwt.token_in_blocklist_loader
    def token_revoked_check(jwt_header, jwt_payload):
        return get_state_store().is_revoked(jwt_payload["jti"])

    @jwt.revoked_token_loader
    def revoked_token_callback(jwt_header, jwt_payload):
        return jsonify({"success": False, "message": message("session/token-revoked"), "data": None}), 401

    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return jsonify({"success": False, "message": message("session/token-expired"), "data": None}), 401

    @jwt.invalid_token_loader
    def invalid_token_callback(err_msg):
        return jsonify({"success": False, "message": f"Invalid token: {err_msg}", "data": None}), 422

    @jwt.unauthorized_loader
    def missing_token_callback(err_msg):
        return jsonify({"success": False, "message": f"Missing token: {err_msg}", "data": None}), 401

    from .routes.auth_routes import auth_bp
    from .routes.medication_routes import medication_bp
    from .routes.dashboard_routes import dashboard_bp
    from .routes.health_routes import health_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(medication_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(health_bp)

    return app
