import logging

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from .extensions import db, login_manager, migrate, project_locks


def create_app(config_object='config.Config'):
    """App factory: JSON API for transcription projects, mounted under /api."""
    app = Flask(__name__)
    app.config.from_object(config_object)

    app.logger.setLevel(getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO))

    db.init_app(app)
    migrate.init_app(app, db, directory='alembic')
    login_manager.init_app(app)
    project_locks.init_app(app)

    @login_manager.request_loader
    def load_user_from_request(req):
        from .models.user import User
        from .services.users_service import get_current_user, UsersServiceError
        token = req.cookies.get(app.config['USERS_SESSION_COOKIE'])
        if not token:
            return None
        try:
            data = get_current_user(token)
        except UsersServiceError:
            app.logger.exception('Session lookup failed')
            return None
        return User.from_service(data) if data else None

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({"error": "Unauthorized"}), 401

    from .blueprints.auth import bp as auth_bp
    app.register_blueprint(auth_bp, url_prefix="/api")

    from .blueprints.projects import bp as projects_bp
    app.register_blueprint(projects_bp, url_prefix="/api/projects")

    from .api.transcribe import bp as transcribe_bp
    app.register_blueprint(transcribe_bp, url_prefix="/api")

    @app.get('/api/ping')
    def ping():
        return jsonify({"ok": True})

    @app.errorhandler(HTTPException)
    def http_error(e):
        # API clients always get JSON, including for 404/405/413
        if request.path.startswith('/api'):
            message = "File too large" if e.code == 413 else e.description
            return jsonify({"error": message}), e.code
        return e

    return app
