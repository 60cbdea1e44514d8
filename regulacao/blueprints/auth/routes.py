from flask import Blueprint, render_template, redirect, url_for, flash, request, current_app
from flask_login import login_user, logout_user, login_required, current_user
from ...models.user import User
from .forms import LoginForm

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")

def _safe_next() -> str | None:
    target = request.args.get("next") or ""
    # só caminhos internos
    if target.startswith("/") and not target.startswith("//"):
        return target
    return None

@auth_bp.route("/login", methods=["GET", "POST"])
def login():
    if current_user.is_authenticated and current_user.status == "active":
        return redirect(_safe_next() or url_for("auth.me"))

    form = LoginForm()
    if form.validate_on_submit():
        key = (form.matricula_or_email.data or "").strip().lower()
        user = User.query.filter((User.matricula == key) | (User.email == key)).first()
        if not user or not user.check_password(form.password.data):
            current_app.logger.warning("Login inválido para %s", key)
            flash("Login inválido.", "danger")
            return render_template("auth/login.html", form=form), 401

        if user.status != "active":
            flash("Acesso ainda não liberado pela gestão.", "warning")
            return render_template("auth/login.html", form=form), 403

        login_user(user)
        current_app.logger.info("Login: %s", user.matricula)
        return redirect(_safe_next() or url_for("auth.me"))

    return render_template("auth/login.html", form=form)

@auth_bp.get("/me")
@login_required
def me():
    return {
        "id": current_user.id,
        "nome": current_user.nome,
        "role": current_user.role,
        "subscriberId": current_user.subscriber_id,
    }

@auth_bp.route("/logout")
@login_required
def logout():
    logout_user()
    return redirect(url_for("auth.login"))
