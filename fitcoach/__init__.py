# fitcoach/__init__.py

import os
import logging
from datetime import timedelta

from dotenv import load_dotenv
from flask import Flask, jsonify, request
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_migrate import Migrate

from fitcoach.services.ai_gateway import AIGateway
from fitcoach.utils.crypto import TokenCipher

# Carga variables de entorno (.env)
load_dotenv()

# Extensiones compartidas
db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
ai = AIGateway()
tokens = TokenCipher()


def _require_secret_key() -> str:
    """Lee SECRET_KEY de entorno y exige mínimo 32 bytes."""
    secret = os.getenv("SECRET_KEY", "")
    if not secret or len(secret) < 32:
        # Seguridad primero: no dejamos arrancar sin clave sólida
        raise RuntimeError(
            "SECRET_KEY no configurado o demasiado corto. "
            "Añade una clave segura al .env (mínimo 32 caracteres)."
        )
    return secret


def _is_dev_mode() -> bool:
    return os.getenv("FLASK_ENV", "").lower() == "development"


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _database_uri(app: Flask, dev_mode: bool) -> str:
    """
    En desarrollo se fuerza SQLite en instance/ (evita depender de un Postgres local).
    En el resto de entornos manda DATABASE_URL, con SQLite como último recurso.
    """
    db_path = os.path.join(app.instance_path, "fitcoach.db")
    default_db_uri = f"sqlite:///{db_path}"
    if dev_mode:
        return default_db_uri
    return os.getenv("DATABASE_URL") or default_db_uri


def _configure_logging(app: Flask) -> None:
    """Logging simple y consistente."""
    default_level = "DEBUG" if app.debug else "INFO"
    level_name = (app.config.get("LOG_LEVEL") or default_level).upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    app.logger.setLevel(level)


def create_app(test_config=None) -> Flask:
    """Factory principal de la aplicación."""
    app = Flask(__name__, instance_relative_config=True)

    # Asegura carpeta instance/
    os.makedirs(app.instance_path, exist_ok=True)

    dev_mode = _is_dev_mode()

    # -----------------------------
    # Config base (segura por defecto)
    # -----------------------------
    app.config.from_mapping(
        SECRET_KEY=_require_secret_key(),
        DEV_MODE=dev_mode,
        SQLALCHEMY_DATABASE_URI=_database_uri(app, dev_mode),
        SQLALCHEMY_TRACK_MODIFICATIONS=False,
        JSON_SORT_KEYS=False,
        # Cookies y sesión seguras
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SAMESITE="Lax",
        SESSION_COOKIE_SECURE=not dev_mode,
        PERMANENT_SESSION_LIFETIME=timedelta(days=7),
        PREFERRED_URL_SCHEME="https",
        MAX_CONTENT_LENGTH=16 * 1024 * 1024,  # vídeos en base64 pesan
        # IA: en desarrollo no se llama al proveedor (cuota)
        OPENAI_API_KEY=os.getenv("OPENAI_API_KEY"),
        OPENAI_MODEL=os.getenv("OPENAI_MODEL", "gpt-3.5-turbo"),
        AI_DEV_MODE=_env_flag("AI_DEV_MODE", dev_mode),
        # Usuario de desarrollo autenticado automáticamente
        DEV_AUTO_LOGIN=_env_flag("DEV_AUTO_LOGIN", dev_mode),
        TOKEN_ENCRYPTION_KEY=os.getenv("TOKEN_ENCRYPTION_KEY"),
        LOG_LEVEL=os.getenv("LOG_LEVEL"),
    )

    # Overrides (tests) ANTES de inicializar extensiones: el engine se crea en init_app
    if test_config:
        app.config.update(test_config)

    _configure_logging(app)

    # Inicializa extensiones
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    ai.init_app(app)
    tokens.init_app(app)

    # ---------------------------------------------------------
    # MODELOS (importar para que Flask-Migrate los detecte)
    # ---------------------------------------------------------
    from fitcoach.models.user import User, UserStats, UserQuestionnaire  # noqa: F401
    from fitcoach.models.workout import WorkoutPlan, Exercise, WorkoutSession  # noqa: F401
    from fitcoach.models.achievement import Achievement  # noqa: F401
    from fitcoach.models.analysis import MovementAnalysis, ExerciseTemplate, BiomechanicalRule  # noqa: F401
    from fitcoach.models.wearable import WearableIntegration, HealthData  # noqa: F401

    # ---------------------------------------------------------
    # BLUEPRINTS
    # ---------------------------------------------------------
    from fitcoach.routes.auth import auth_routes
    from fitcoach.routes.main import main as main_bp
    from fitcoach.routes.dashboard import dashboard_bp
    from fitcoach.routes.workouts import workouts_bp
    from fitcoach.routes.movement import movement_bp
    from fitcoach.routes.achievements import achievements_bp
    from fitcoach.routes.wearables import wearables_bp
    from fitcoach.routes.onboarding import onboarding_bp
    from fitcoach.routes.nutrition import nutrition_bp
    from fitcoach.routes.gdpr import gdpr_bp

    for bp in (
        auth_routes,
        main_bp,
        dashboard_bp,
        workouts_bp,
        movement_bp,
        achievements_bp,
        wearables_bp,
        onboarding_bp,
        nutrition_bp,
        gdpr_bp,
    ):
        app.register_blueprint(bp)

    # ---------------------------------------------------------
    # CLI (seed, export)
    # ---------------------------------------------------------
    from fitcoach.cli import register_cli
    register_cli(app)

    # ---------------------------------------------------------
    # Manejo de errores JSON (básico)
    # ---------------------------------------------------------
    @app.errorhandler(400)
    @app.errorhandler(401)
    @app.errorhandler(403)
    @app.errorhandler(404)
    @app.errorhandler(405)
    @app.errorhandler(409)
    @app.errorhandler(500)
    def _http_errors(err):
        # Si la petición es JSON, devolvemos JSON consistente
        if request.is_json or request.path.startswith("/api/"):
            code = getattr(err, "code", 500) or 500
            return jsonify(error_code="http_error", message=str(err)), code
        return err

    app.logger.info(
        "[init] fitcoach listo (dev=%s, ai_dev=%s, db=%s)",
        dev_mode,
        app.config["AI_DEV_MODE"],
        app.config["SQLALCHEMY_DATABASE_URI"].split("://", 1)[0],
    )
    return app
