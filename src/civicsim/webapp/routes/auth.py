"""Authentication routes (JSON)."""

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required, login_user, logout_user

from civicsim.notifications import validate_phone_number

from ..extensions import db
from ..models.user import User

bp = Blueprint("auth", __name__, url_prefix="/auth")

MIN_PASSWORD_LENGTH = 8


def _payload() -> dict:
    """Request fields from a JSON body or a form post."""
    return request.get_json(silent=True) or request.form.to_dict()


@bp.route("/register", methods=["POST"])
def register():
    """Create an account."""
    data = _payload()
    username = (data.get("username") or "").strip()
    password = data.get("password") or ""
    confirm = data.get("confirm", password)
    phone_number = (data.get("phone_number") or "").strip() or None

    errors = []
    if not username:
        errors.append("Username is required.")
    elif len(username) < 3:
        errors.append("Username must be at least 3 characters.")
    elif len(username) > 64:
        errors.append("Username must be at most 64 characters.")

    if not password:
        errors.append("Password is required.")
    elif len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")

    if password != confirm:
        errors.append("Passwords do not match.")

    if phone_number is not None:
        phone = validate_phone_number(phone_number)
        if phone.is_valid:
            phone_number = phone.formatted
        else:
            errors.append("Phone number must have 10 to 15 digits.")

    if username and User.query.filter_by(username=username).first():
        errors.append("Username already taken.")

    if errors:
        return jsonify({"errors": errors}), 400

    user = User(username=username, name=(data.get("name") or "").strip() or None, phone_number=phone_number)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()

    return jsonify({"user": user.to_dict()}), 201


@bp.route("/login", methods=["POST"])
def login():
    data = _payload()
    username = (data.get("username") or "").strip()
    password = data.get("password") or ""

    user = User.query.filter_by(username=username).first()

    # Use same error message for invalid user vs invalid password
    if user is None or not user.check_password(password):
        return jsonify({"error": "Invalid username or password."}), 401

    login_user(user)
    db.session.commit()  # persist a rehashed password
    return jsonify({"user": user.to_dict()})


@bp.route("/logout", methods=["POST"])
@login_required
def logout():
    logout_user()
    return jsonify({"message": "Logged out."})


@bp.route("/me")
@login_required
def me():
    return jsonify({"user": current_user.to_dict()})
