"""Flask web interface for the Cash Flow Tracker."""

from __future__ import annotations

import logging
from functools import wraps
from typing import Dict, List, Optional

from flask import (
    Flask,
    flash,
    g,
    jsonify,
    redirect,
    render_template,
    request,
    session,
    url_for,
)
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from werkzeug.security import check_password_hash, generate_password_hash

from .analytics import summarize_cash_flows
from .config import PACKAGE_ROOT, AppConfig, resolve_config_path
from .db import init_db
from .exceptions import ValidationError
from .logger import setup_logger
from .models import CashFlowType, User, db
from .reports import build_summary
from .service import CashFlowService

logger = logging.getLogger(__name__)

TYPE_OPTIONS = (
    (CashFlowType.CASH_IN.value, "Cash in"),
    (CashFlowType.CASH_OUT.value, "Cash out"),
)

# Form and JSON fields that map onto service arguments. Anything else,
# including an owner/user id, is ignored.
CASH_FLOW_FIELDS = ("type", "source", "label", "amount", "description")


def login_required(view):
    @wraps(view)
    def wrapped_view(**kwargs):
        if g.user is None:
            return redirect(url_for("login"))
        return view(**kwargs)

    return wrapped_view


def api_login_required(view):
    @wraps(view)
    def wrapped_view(**kwargs):
        if g.user is None:
            return jsonify({"error": "authentication required"}), 401
        return view(**kwargs)

    return wrapped_view


def _load_logged_in_user() -> None:
    user_id = session.get("user_id")
    if user_id is None:
        g.user = None
        return
    g.user = db.session.get(User, user_id)


def _cash_flow_fields(data) -> Dict[str, Optional[str]]:
    return {name: data.get(name) for name in CASH_FLOW_FIELDS}


def _empty_form() -> Dict[str, str]:
    return {
        "type": CashFlowType.CASH_OUT.value,
        "source": "",
        "label": "",
        "amount": "",
        "description": "",
    }


def _form_from_record(cash_flow) -> Dict[str, str]:
    return {
        "type": cash_flow.type,
        "source": cash_flow.source,
        "label": cash_flow.label,
        "amount": str(cash_flow.amount),
        "description": cash_flow.description or "",
    }


def create_app(config_path: Optional[str] = None, overrides: Optional[Dict[str, object]] = None) -> Flask:
    app = Flask(
        __name__,
        template_folder=str(PACKAGE_ROOT / "templates"),
    )
    cfg = AppConfig.load(resolve_config_path(config_path))
    app.config.update(cfg.flask_settings())
    if overrides:
        app.config.update(overrides)

    setup_logger("cashflow_tracker", app.config["LOG_LEVEL"])
    init_db(app)
    app.before_request(_load_logged_in_user)

    service = CashFlowService()

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        return jsonify({"error": exc.message, "details": exc.details}), 400

    @app.route("/signup", methods=["GET", "POST"])
    def signup():
        if g.user is not None:
            return redirect(url_for("list_cash_flows"))
        errors: List[str] = []
        form = {"username": "", "email": ""}
        if request.method == "POST":
            username = (request.form.get("username") or "").strip()
            email = (request.form.get("email") or "").strip()
            password = request.form.get("password") or ""
            form["username"] = username
            form["email"] = email
            if not username:
                errors.append("Username is required.")
            if not email:
                errors.append("Email is required.")
            if not password:
                errors.append("Password is required.")
            if not errors:
                user = User(username=username, email=email, password_hash=generate_password_hash(password))
                db.session.add(user)
                try:
                    db.session.commit()
                except IntegrityError:
                    db.session.rollback()
                    errors.append("Username or email already exists.")
                else:
                    logger.info("User %s signed up", user.id)
                    session.clear()
                    session["user_id"] = user.id
                    return redirect(url_for("list_cash_flows"))
        return render_template("auth.html", mode="signup", errors=errors, form=form)

    @app.route("/login", methods=["GET", "POST"])
    def login():
        if g.user is not None:
            return redirect(url_for("list_cash_flows"))
        errors: List[str] = []
        form = {"username": ""}
        if request.method == "POST":
            username = (request.form.get("username") or "").strip()
            password = request.form.get("password") or ""
            form["username"] = username
            user = db.session.execute(
                db.select(User).where(or_(User.username == username, User.email == username))
            ).scalars().first()
            if user is None or not check_password_hash(user.password_hash, password):
                logger.warning("Failed login attempt")
                errors.append("Invalid credentials.")
            else:
                session.clear()
                session["user_id"] = user.id
                return redirect(url_for("list_cash_flows"))
        return render_template("auth.html", mode="login", errors=errors, form=form)

    @app.route("/logout", methods=["POST"])
    @login_required
    def logout():
        session.clear()
        return redirect(url_for("login"))

    @app.route("/")
    @login_required
    def index():
        return redirect(url_for("list_cash_flows"))

    @app.route("/cash-flows")
    @login_required
    def list_cash_flows():
        search = (request.args.get("search") or "").strip()
        cash_flows = service.list(g.user.id, search)
        summary = summarize_cash_flows(cash_flows)
        return render_template(
            "cash_flows/home.html",
            user=g.user,
            cash_flows=cash_flows,
            search=search,
            total_in=summary.total_in,
            total_out=summary.total_out,
            balance=summary.balance,
        )

    @app.route("/cash-flows/add", methods=["GET", "POST"])
    @login_required
    def add_cash_flow():
        form = _empty_form()
        if request.method == "POST":
            fields = _cash_flow_fields(request.form)
            try:
                service.create(g.user.id, **fields)
            except ValidationError as exc:
                flash(exc.message, "error")
                form.update({k: v or "" for k, v in fields.items()})
            else:
                flash("Cash flow added.", "success")
                return redirect(url_for("list_cash_flows"))
        return render_template(
            "cash_flows/form.html",
            form=form,
            form_mode="add",
            type_options=TYPE_OPTIONS,
            action_url=url_for("add_cash_flow"),
        )

    @app.route("/cash-flows/edit/<cash_flow_id>", methods=["GET", "POST"])
    @login_required
    def edit_cash_flow(cash_flow_id: str):
        if request.method == "POST":
            fields = _cash_flow_fields(request.form)
            try:
                updated = service.update(g.user.id, cash_flow_id, **fields)
            except ValidationError as exc:
                flash(exc.message, "error")
                form = {k: v or "" for k, v in fields.items()}
            else:
                if updated is None:
                    flash("Cash flow not found.", "error")
                else:
                    flash("Cash flow updated.", "success")
                return redirect(url_for("list_cash_flows"))
        else:
            cash_flow = service.get_by_id(g.user.id, cash_flow_id)
            if cash_flow is None:
                flash("Cash flow not found.", "error")
                return redirect(url_for("list_cash_flows"))
            form = _form_from_record(cash_flow)
        return render_template(
            "cash_flows/form.html",
            form=form,
            form_mode="edit",
            type_options=TYPE_OPTIONS,
            action_url=url_for("edit_cash_flow", cash_flow_id=cash_flow_id),
        )

    @app.route("/cash-flows/delete/<cash_flow_id>", methods=["POST"])
    @login_required
    def delete_cash_flow(cash_flow_id: str):
        if service.delete(g.user.id, cash_flow_id):
            flash("Cash flow deleted.", "success")
        else:
            flash("Cash flow not found.", "error")
        return redirect(url_for("list_cash_flows"))

    @app.route("/api/cash-flows", methods=["GET", "POST"])
    @api_login_required
    def api_cash_flows():
        if request.method == "POST":
            payload = request.get_json(silent=True)
            if not isinstance(payload, dict):
                return jsonify({"error": "expected a JSON object"}), 400
            cash_flow = service.create(g.user.id, **_cash_flow_fields(payload))
            return jsonify(cash_flow.to_dict()), 201
        cash_flows = service.list(g.user.id, request.args.get("search"))
        return jsonify(
            {
                "cash_flows": [cf.to_dict() for cf in cash_flows],
                "summary": summarize_cash_flows(cash_flows).to_dict(),
            }
        )

    @app.route("/api/cash-flows/<cash_flow_id>", methods=["GET", "PUT", "DELETE"])
    @api_login_required
    def api_cash_flow(cash_flow_id: str):
        if request.method == "DELETE":
            if not service.delete(g.user.id, cash_flow_id):
                return jsonify({"error": "not found"}), 404
            return "", 204
        if request.method == "PUT":
            payload = request.get_json(silent=True)
            if not isinstance(payload, dict):
                return jsonify({"error": "expected a JSON object"}), 400
            cash_flow = service.update(g.user.id, cash_flow_id, **_cash_flow_fields(payload))
        else:
            cash_flow = service.get_by_id(g.user.id, cash_flow_id)
        if cash_flow is None:
            return jsonify({"error": "not found"}), 404
        return jsonify(cash_flow.to_dict())

    @app.route("/api/summary")
    @api_login_required
    def api_summary():
        search = request.args.get("search")
        summary = build_summary(service.list(g.user.id, search))
        summary["search"] = (search or "").strip()
        return jsonify(summary)

    return app


if __name__ == "__main__":
    create_app().run(debug=True)
