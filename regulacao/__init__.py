from __future__ import annotations

import os
from flask import Flask, jsonify, redirect, request, url_for
from dotenv import load_dotenv

from .config import Config
from .extensions import db, login_manager, csrf


def create_app(config_object=None) -> Flask:
    load_dotenv()

    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_object or Config())
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # sqlite e documentos das listas ficam em instance/
    os.makedirs(app.instance_path, exist_ok=True)
    app.config.setdefault("UPLOAD_FOLDER", os.path.join(app.instance_path, "uploads"))
    os.makedirs(app.config["UPLOAD_FOLDER"], exist_ok=True)

    # extensões
    db.init_app(app)
    login_manager.init_app(app)
    csrf.init_app(app)

    # sessão da equipe (gerência/regulação)
    from .models.user import User

    @login_manager.user_loader
    def load_user(user_id: str):
        try:
            return db.session.get(User, int(user_id))
        except (TypeError, ValueError):
            return None

    @login_manager.unauthorized_handler
    def unauthorized():
        # API responde JSON; páginas redirecionam pro login
        if request.path.startswith("/api/"):
            return jsonify({"error": "unauthenticated", "message": "Sessão expirada. Faça login novamente."}), 401
        return redirect(url_for("auth.login", next=request.path))

    # register blueprints
    from .blueprints.auth.routes import auth_bp
    from .blueprints.lists.routes import lists_api_bp, lists_page_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(lists_api_bp)
    app.register_blueprint(lists_page_bp)

    # create db tables
    with app.app_context():
        # garante que todos os models sejam importados/registrados no metadata
        from . import models  # noqa: F401
        db.create_all()

    # CLI commands
    from .seed import register_seed_command
    register_seed_command(app)

    return app
