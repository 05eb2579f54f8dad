"""Authentication blueprint: registration, JWT login/refresh and profile.
API:
- POST /api/auth/register
- POST /api/auth/login
- GET  /api/auth/me
- PUT  /api/auth/profile
- POST /api/auth/change-password
- POST /api/auth/refresh
"""
from __future__ import annotations
from flask import Blueprint, g, jsonify, request
from flask_jwt_extended import jwt_required

from ..errors import BillTrackerError, ConflictError, NotFoundError
from ..extensions import db
from ..repositories import UserRepository
from ..schemas import LoginSchema, PasswordChangeSchema, ProfileUpdateSchema, RegisterSchema
from ..utils.helpers import api_error
from ..utils.logging_utils import audit_logger
from ..utils.middleware import audit_security_event, rate_limit
from ..utils.security import create_token, current_user_id, verify_password

bp = Blueprint("auth", __name__)


def _current_user():
    user = UserRepository().get_by_id(current_user_id())
    if user is None:
        raise NotFoundError("User")
    return user


@bp.route("/api/auth/register", methods=["POST"])
@rate_limit("auth")
@audit_security_event("register")
@api_error("registering")
def register():
    data = RegisterSchema.from_request()
    users = UserRepository()
    if users.find_by_email(data.email):
        raise ConflictError("User with this email already exists")
    user = users.create_user(data.email, data.name, data.password)
    users.commit()
    g.audit_user_id = user.id
    audit_logger.log_user_action(user.id, "register", "user", "success", ip_address=request.remote_addr)
    return jsonify({
        "message": "User registered successfully",
        "user": user.to_public(),
        "token": create_token(user),
    })


@bp.route("/api/auth/login", methods=["POST"])
@rate_limit("auth")
@audit_security_event("login")
@api_error("logging in")
def login():
    data = LoginSchema.from_request()
    user = UserRepository().authenticate(data.email, data.password)
    if user is None:
        return jsonify({"error": "Invalid credentials"}), 401
    g.audit_user_id = user.id
    return jsonify({
        "message": "Login successful",
        "user": user.to_public(),
        "token": create_token(user),
    })


@bp.route("/api/auth/me")
@jwt_required()
@api_error("fetching the current user")
def me():
    return jsonify({"user": _current_user().to_dict()})


@bp.route("/api/auth/profile", methods=["PUT"])
@jwt_required()
@api_error("updating profile")
def update_profile():
    data = ProfileUpdateSchema.from_request()
    user = _current_user()
    if data.name is not None:
        user.name = data.name
    if data.settings is not None:
        user.settings = data.settings
    db.session.commit()
    return jsonify({"message": "Profile updated successfully", "user": user.to_dict()})


@bp.route("/api/auth/change-password", methods=["POST"])
@jwt_required()
@audit_security_event("change_password")
@api_error("changing password")
def change_password():
    data = PasswordChangeSchema.from_request()
    users = UserRepository()
    user = _current_user()
    g.audit_user_id = user.id
    if not verify_password(user.password_hash, data.current_password):
        raise BillTrackerError("Current password is incorrect")
    users.update_password(user, data.new_password)
    users.commit()
    return jsonify({"message": "Password changed successfully"})


@bp.route("/api/auth/refresh", methods=["POST"])
@jwt_required()
@api_error("refreshing the token")
def refresh():
    return jsonify({"token": create_token(_current_user())})
