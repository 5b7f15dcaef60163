from __future__ import annotations

from flask import Flask, g, jsonify

from ..container import Container
from ..web.guards import token_required
from ..web.payload import json_body, opt_int
from ..web.serialization import dump
from .model import Registration


def register(app: Flask, container: Container) -> None:
    auth = container.auth_service
    authenticated = token_required(container.issuer)

    @app.route("/api/auth/register", methods=["POST"], endpoint="auth_register")
    def register_user():
        data = json_body()
        tokens = auth.register(
            Registration(
                username=data.get("username") or "",
                email=data.get("email") or "",
                password=data.get("password") or "",
                confirm_password=data.get("confirmPassword") or "",
                first_name=data.get("firstName") or "",
                last_name=data.get("lastName") or "",
                employee_id=opt_int(data, "employeeId"),
            )
        )
        return jsonify(dump(tokens)), 201

    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def login():
        data = json_body()
        return jsonify(dump(auth.login(data.get("email") or "", data.get("password") or "")))

    @app.route("/api/auth/refresh", methods=["POST"], endpoint="auth_refresh")
    def refresh():
        data = json_body()
        return jsonify(dump(auth.refresh(data.get("accessToken") or "", data.get("refreshToken") or "")))

    @app.route("/api/auth/revoke", methods=["POST"], endpoint="auth_revoke")
    @authenticated
    def revoke():
        data = json_body()
        auth.revoke(data.get("refreshToken") or "")
        return "", 204

    @app.route("/api/auth/logout", methods=["POST"], endpoint="auth_logout")
    @authenticated
    def logout():
        revoked = auth.logout(g.current_user_id)
        return jsonify({"revoked": revoked})

    @app.route("/api/auth/me", methods=["GET"], endpoint="auth_me")
    @authenticated
    def me():
        return jsonify(dump(auth.get_user(g.current_user_id)))
