# fitcoach/routes/auth.py
from flask import Blueprint, current_app, jsonify
from flask_login import current_user, login_required, login_user, logout_user
from flask_wtf.csrf import generate_csrf
from werkzeug.security import check_password_hash, generate_password_hash

from fitcoach import db
from fitcoach.forms.auth_forms import LoginForm, RegisterForm
from fitcoach.models.user import User, upsert_user
from fitcoach.utils.http import json_body, validation_error

auth_routes = Blueprint("auth", __name__)

PROFILE_FIELDS = {
    "firstName": "first_name",
    "lastName": "last_name",
    "profileImageUrl": "profile_image_url",
}


def _form_errors(form):
    return {k: v[0] for k, v in form.errors.items() if v}


# ---------- Sesión ----------
@auth_routes.route("/register", methods=("POST",))
def register():
    form = RegisterForm()
    if not form.validate_on_submit():
        return validation_error("Datos de registro inválidos", _form_errors(form))

    email = form.email.data.strip().lower()
    if User.query.filter_by(email=email).first():
        return jsonify(error="UserExists", message="El usuario ya existe. Inicia sesión."), 409

    user = upsert_user(
        email,
        password=generate_password_hash(form.password.data),
        first_name=(form.firstName.data or "").strip() or None,
        last_name=(form.lastName.data or "").strip() or None,
    )
    db.session.commit()
    login_user(user)
    current_app.logger.info("[auth] alta usuario=%s", user.id)
    return jsonify(user.to_dict()), 201


@auth_routes.route("/login", methods=("POST",))
def login():
    form = LoginForm()
    if not form.validate_on_submit():
        return validation_error("Datos de acceso inválidos", _form_errors(form))

    user = User.query.filter_by(email=form.email.data.strip().lower()).first()
    if not user or not user.password or not check_password_hash(user.password, form.password.data):
        return jsonify(error="InvalidCredentials", message="Credenciales inválidas."), 401

    login_user(user)
    return jsonify(user.to_dict())


@auth_routes.route("/logout")
@login_required
def logout():
    logout_user()
    return jsonify(ok=True)


@auth_routes.route("/api/auth/csrf")
def csrf_token():
    return jsonify(csrfToken=generate_csrf())


# ---------- Usuario actual ----------
@auth_routes.route("/api/auth/user", methods=("GET",))
@login_required
def get_user():
    return jsonify(current_user.to_dict())


@auth_routes.route("/api/auth/user", methods=("PATCH",))
@login_required
def update_user():
    data = json_body()
    errors = {}

    for key, attr in PROFILE_FIELDS.items():
        if key in data:
            value = data[key]
            if value is not None and not isinstance(value, str):
                errors[key] = "Debe ser texto"
            else:
                setattr(current_user, attr, (value or "").strip() or None)

    if "fitnessLevel" in data:
        level = data["fitnessLevel"]
        if not isinstance(level, int) or isinstance(level, bool) or not 1 <= level <= 5:
            errors["fitnessLevel"] = "Entero entre 1 y 5"
        else:
            current_user.fitness_level = level

    if "goals" in data:
        goals = data["goals"]
        if not isinstance(goals, (list, str)):
            errors["goals"] = "Lista de objetivos"
        else:
            current_user.set_goals(goals)

    if errors:
        db.session.rollback()
        return validation_error("Perfil inválido", errors)

    db.session.commit()
    return jsonify(current_user.to_dict())
