# app/__init__.py

# =====================================================================================
# 1. Environment variables (loaded first)
# =====================================================================================
from dotenv import load_dotenv
load_dotenv()

# =====================================================================================
# 2. Module imports
# =====================================================================================
import os
import logging
from flask import Flask
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException
from flask_jwt_extended import JWTManager
import firebase_admin
from firebase_admin import credentials, firestore

# - config and errors
from app.core.config import config_by_name
from app.core.exceptions import ApiError, DuplicateKeyError
from app.utils.api_response import error_response, success_response

# - API blueprints
from app.api.auth.routes import auth_bp
from app.api.pets.routes import pets_bp
from app.api.applications.routes import applications_bp

# - services and stores
from app.services.storage_service import StorageService
from app.repositories import ApplicationRepository, PetRepository, UserRepository
from app.api.auth.services import AuthService
from app.api.pets.services import PetService
from app.api.applications.services import ApplicationWorkflow
from app.cli import register_cli


def _flatten_validation_errors(messages, prefix=''):
    """marshmallow's nested message dict as a flat [{field, message}] list with dotted paths."""
    if isinstance(messages, (list, tuple)):
        return [{'field': prefix or '_schema', 'message': str(m)} for m in messages]
    errors = []
    for key, value in messages.items():
        path = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, dict):
            errors.extend(_flatten_validation_errors(value, path))
        elif isinstance(value, (list, tuple)):
            errors.extend({'field': path, 'message': str(m)} for m in value)
        else:
            errors.append({'field': path, 'message': str(value)})
    return errors


def create_app(config_name=None, db=None, storage_service=None):
    """
    Flask application factory.

    ``db`` (a Firestore client) and ``storage_service`` can be injected; when
    omitted they are built from the Firebase credentials in the config.
    """
    # =====================================================================================
    # 3. Flask app and base config
    # =====================================================================================
    config_name = config_name or os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    app.json.ensure_ascii = False

    if not app.debug and not app.testing:
        logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]')

    if not app.config.get('JWT_SECRET_KEY'):
        raise ValueError("JWT_SECRET_KEY must be set in .env or the config class.")

    # =====================================================================================
    # 4. Extensions and external services
    # =====================================================================================
    jwt = JWTManager(app)

    if db is None:
        if not firebase_admin._apps:
            cred_path = app.config.get('FIREBASE_CREDENTIALS_PATH')
            if not cred_path or not os.path.exists(cred_path):
                raise FileNotFoundError(f"Firebase credentials file not found: {cred_path}")
            cred = credentials.Certificate(cred_path)
            firebase_admin.initialize_app(cred, {
                'storageBucket': app.config['FIREBASE_STORAGE_BUCKET']
            })
        db = firestore.client()

    # =====================================================================================
    # 5. Service instances stored on 'app.services' (dependency injection)
    # =====================================================================================
    app.services = {}

    # 5-1. shared services with no domain dependencies
    if storage_service is None:
        storage_service = StorageService()
        storage_service.init_app(app)
    app.services['storage'] = storage_service

    pet_repository = PetRepository(db)
    application_repository = ApplicationRepository(db)
    user_repository = UserRepository(db)

    # 5-2. domain services
    app.services['auth'] = AuthService(user_repository)
    app.services['pets'] = PetService(
        pet_repository=pet_repository,
        application_repository=application_repository,
        storage_service=app.services['storage'],
        photo_extensions=app.config['PET_PHOTO_EXTENSIONS'],
        photo_max_bytes=app.config['PET_PHOTO_MAX_BYTES'],
        photo_max_files=app.config['PET_PHOTO_MAX_FILES']
    )
    app.services['applications'] = ApplicationWorkflow(
        application_repository=application_repository,
        pet_repository=pet_repository,
        user_repository=user_repository
    )
    logging.info("Domain services initialized successfully")

    # - JWT callbacks (blocklist lookups need the auth service)
    @jwt.token_in_blocklist_loader
    def check_if_token_revoked(jwt_header, jwt_payload):
        return app.services['auth'].is_token_revoked(jwt_payload)

    @jwt.unauthorized_loader
    def missing_token_callback(reason):
        return error_response("Not authorized to access this route", 401)

    @jwt.invalid_token_loader
    def invalid_token_callback(reason):
        return error_response("Not authorized to access this route", 401)

    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return error_response("Token has expired", 401)

    @jwt.revoked_token_loader
    def revoked_token_callback(jwt_header, jwt_payload):
        return error_response("Token has been revoked", 401)

    # =====================================================================================
    # 6. Blueprints
    # =====================================================================================
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(pets_bp, url_prefix='/api/pets')
    app.register_blueprint(applications_bp, url_prefix='/api/applications')

    @app.route('/api/health', methods=['GET'])
    def health_check():
        return success_response('Pet adoption API is running')

    register_cli(app)

    # =====================================================================================
    # 7. Global error handlers
    # =====================================================================================
    @app.errorhandler(ApiError)
    def handle_api_error(err):
        return error_response(err.message, err.status_code, err.errors)

    @app.errorhandler(ValidationError)
    def handle_marshmallow_validation(err):
        return error_response("Validation failed", 422, _flatten_validation_errors(err.messages))

    @app.errorhandler(DuplicateKeyError)
    def handle_duplicate_key(err):
        return error_response(str(err), 400, {'field': err.field, 'message': str(err)})

    @app.errorhandler(HTTPException)
    def handle_http_exception(err):
        if err.code == 404:
            return error_response("Route not found", 404)
        if err.code == 413:
            return error_response("File upload error: request is too large", 413)
        return error_response(err.description or err.name, err.code)

    @app.errorhandler(Exception)
    def handle_generic_exception(err):
        # anything not handled above
        logging.error(f"An unhandled exception occurred: {err}", exc_info=True)
        return error_response("Server Error", 500)

    # =====================================================================================
    # 8. Logging and return
    # =====================================================================================
    logging.info(f"Flask app created for '{config_name}' environment.")

    return app
