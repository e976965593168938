import logging
from datetime import datetime, timedelta

import click
from bson import ObjectId
from bson.errors import InvalidId
from flask import Flask, jsonify
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from werkzeug.exceptions import HTTPException
from werkzeug.security import generate_password_hash

import config
from database import mongo
from routes.admin_routes import admin_bp
from routes.auth_routes import auth_bp
from routes.course_routes import course_bp
from routes.quiz_routes import quiz_bp
from routes.report_routes import report_bp
from routes.results_routes import results_bp
from routes.user_routes import user_bp
from utils.errors import ApiError, Unauthenticated
from utils.identity import Role

logger = logging.getLogger(__name__)


def _error(exc):
    return jsonify(exc.to_dict()), exc.status_code


def register_jwt_callbacks(jwt):
    @jwt.user_lookup_loader
    def load_user(_jwt_header, jwt_data):
        try:
            user_id = ObjectId(jwt_data["sub"])
        except (InvalidId, TypeError):
            return None
        return mongo.get_collections().users.find_one({"_id": user_id}, {"password": 0})

    @jwt.user_lookup_error_loader
    def unknown_user(_jwt_header, _jwt_data):
        return _error(Unauthenticated("Token is not valid"))

    @jwt.unauthorized_loader
    def missing_token(_reason):
        return _error(Unauthenticated("No token, authorization denied"))

    @jwt.invalid_token_loader
    def invalid_token(_reason):
        return _error(Unauthenticated("Token is not valid"))

    @jwt.expired_token_loader
    def expired_token(_jwt_header, _jwt_data):
        return _error(Unauthenticated("Token has expired"))


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(exc):
        return _error(exc)

    @app.errorhandler(HTTPException)
    def handle_http_error(exc):
        return jsonify({"message": exc.description, "error": exc.name.lower().replace(" ", "_")}), exc.code

    @app.errorhandler(Exception)
    def handle_unexpected(exc):
        logger.exception("Unhandled error")
        return jsonify({"message": "Server Error", "error": "internal"}), 500


def register_commands(app):
    @app.cli.command("seed-admin")
    @click.option("--destroy", is_flag=True, help="Remove every admin account instead.")
    def seed_admin(destroy):
        """Create the default admin account, replacing one with the same email."""
        users = mongo.get_collections().users
        if destroy:
            result = users.delete_many({"role": Role.ADMIN.value})
            click.echo(f"Admin users destroyed: {result.deleted_count}")
            return

        email = app.config["ADMIN_EMAIL"].strip().lower()
        users.delete_many({"email": email})
        users.insert_one({
            "name": app.config["ADMIN_NAME"],
            "email": email,
            "password": generate_password_hash(app.config["ADMIN_PASSWORD"]),
            "role": Role.ADMIN.value,
            "created_at": datetime.utcnow(),
        })
        click.echo(f"Admin user {email} created successfully!")


def create_app(overrides=None, mongo_client=None):
    app = Flask(__name__)
    app.config.update(
        MONGO_URI=config.MONGO_URI,
        DB_NAME=config.DB_NAME,
        JWT_SECRET_KEY=config.JWT_SECRET_KEY,
        JWT_ACCESS_TOKEN_EXPIRES=timedelta(hours=config.JWT_EXPIRES_HOURS),
        JWT_TOKEN_LOCATION=["headers"],
        JWT_HEADER_NAME=config.AUTH_HEADER,
        JWT_HEADER_TYPE="",
        ADMIN_NAME=config.ADMIN_NAME,
        ADMIN_EMAIL=config.ADMIN_EMAIL,
        ADMIN_PASSWORD=config.ADMIN_PASSWORD,
    )
    if overrides:
        app.config.update(overrides)

    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    CORS(
        app,
        origins=config.CORS_ORIGINS,
        methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", config.AUTH_HEADER],
    )

    mongo.init_app(app, client=mongo_client)

    jwt = JWTManager(app)
    register_jwt_callbacks(jwt)
    register_error_handlers(app)
    register_commands(app)

    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(user_bp, url_prefix="/api/users")
    app.register_blueprint(course_bp, url_prefix="/api/courses")
    app.register_blueprint(quiz_bp, url_prefix="/api/quizzes")
    app.register_blueprint(admin_bp, url_prefix="/api/admin")
    app.register_blueprint(report_bp, url_prefix="/api/reports")
    app.register_blueprint(results_bp, url_prefix="/api/results")

    @app.route("/")
    def home():
        return "Learnix API is running!"

    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=config.PORT)
