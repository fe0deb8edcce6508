"""Authentication routes."""

from __future__ import annotations

from flask import current_app, jsonify, make_response, request

from ...extensions import get_session_factory
from ...services.auth import (
    get_user,
    issue_token,
    login,
    serialize_user,
    set_password,
    signup,
    verify_email,
)
from ..guards import json_body, require_principal
from . import bp


@bp.post("/login")
def login_user():
    payload = json_body()
    user = login(
        email=str(payload.get("email") or ""),
        password=str(payload.get("password") or ""),
        session_factory=get_session_factory(),
    )
    config = current_app.config["SALVUS_CONFIG"]
    token = issue_token(user, secret_key=config.SECRET_KEY)

    response = make_response(jsonify({"message": "Login successful", "user": serialize_user(user)}))
    response.set_cookie(
        config.TOKEN_COOKIE,
        token,
        max_age=config.TOKEN_MAX_AGE,
        httponly=True,
        samesite="Lax",
        secure=not config.DEV_MODE,
    )
    return response


@bp.get("/login")
def current_user():
    principal = require_principal()
    user = get_user(principal.user_id, get_session_factory())
    if user is None:
        return jsonify({"message": "Unauthorized"}), 401
    return jsonify({"user": serialize_user(user)})


@bp.post("/logout")
def logout_user():
    config = current_app.config["SALVUS_CONFIG"]
    response = make_response(jsonify({"message": "Logged out"}))
    response.delete_cookie(config.TOKEN_COOKIE)
    return response


@bp.post("/set-password")
def set_user_password():
    payload = json_body()
    set_password(
        token=str(payload.get("token") or ""),
        password=payload.get("password"),
        session_factory=get_session_factory(),
    )
    return jsonify({"message": "Password set successfully. You can now log in."})


@bp.post("/signup")
def signup_user():
    payload = json_body()
    config = current_app.config["SALVUS_CONFIG"]
    signup(
        name=str(payload.get("name") or ""),
        email=str(payload.get("email") or ""),
        password=str(payload.get("password") or ""),
        invite_token=payload.get("inviteToken") or None,
        secret_key=config.SECRET_KEY,
        session_factory=get_session_factory(),
    )
    return jsonify({"message": "User created successfully. Please verify your email."}), 201


@bp.route("/verify", methods=["GET", "POST"])
def verify_user_email():
    if request.method == "GET":
        token = request.args.get("token", "")
    else:
        token = str(json_body().get("token") or "")
    verify_email(token=token, session_factory=get_session_factory())
    return jsonify({"message": "Email verified successfully"})
