# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/asset_tracker/routes/auth.py
"""
Authentication API routes

SECURITY FEATURES:
- Password length validation on registration and password change
- Session management with token-based auth
- Password change revokes every other session of the user
"""

from flask import Blueprint, request, jsonify, g

from ..services import auth_service
from ..services import session_service
from ..decorators import require_auth
from ..errors import AssetTrackerError
from ..responses import json_body, domain_error, internal_error


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _session_payload(user, message: str) -> dict:
    session, token = session_service.create_session(
        user_id=user.id,
        user_agent=request.headers.get("User-Agent"),
        ip_address=request.remote_addr,
    )
    return {
        "user": user.to_dict(),
        "token": token,
        "session": session.to_dict(),
        "message": message,
    }


@auth_bp.post("/register")
def register_route():
    """
    Self-registration. New accounts always get the Employee role;
    privileged accounts come from `flask users create`.
    """
    try:
        data = json_body()
        user = auth_service.create_user(
            name=data.get("name"),
            email=data.get("email"),
            password=data.get("password"),
            role="Employee",
        )
        return jsonify(_session_payload(user, "Registration successful")), 201
    except AssetTrackerError as e:
        return domain_error(e)
    except Exception:
        return internal_error("Failed to register user")


@auth_bp.post("/login")
def login_route():
    """
    Authenticate user and create session token.

    Token must be included in the Authorization header for protected routes.
    """
    try:
        data = json_body()
        email = data.get("email")
        password = data.get("password")

        if not all([email, password]):
            return jsonify({"error": "email and password required"}), 400

        user = auth_service.authenticate(email, password)
        if not user:
            return jsonify({"error": "Invalid credentials"}), 401

        return jsonify(_session_payload(user, "Login successful")), 200

    except AssetTrackerError as e:
        return domain_error(e)
    except Exception:
        return internal_error("Failed to login user")


@auth_bp.post("/logout")
@require_auth
def logout_route():
    try:
        session_service.revoke_session(g.auth_token, reason="User logout")
        return jsonify({"message": "Logged out"}), 200
    except Exception:
        return internal_error("Failed to logout user")


@auth_bp.get("/me")
@require_auth
def me_route():
    return jsonify({"user": g.current_user.to_dict()}), 200


@auth_bp.put("/profile")
@require_auth
def update_profile_route():
    try:
        data = json_body()
        user = auth_service.update_profile(
            g.current_user.id,
            name=data.get("name"),
            email=data.get("email"),
        )
        return jsonify({"user": user.to_dict()}), 200
    except AssetTrackerError as e:
        return domain_error(e)
    except Exception:
        return internal_error("Failed to update profile")


@auth_bp.put("/password")
@require_auth
def change_password_route():
    try:
        data = json_body()
        if not data.get("currentPassword") or not data.get("newPassword"):
            return jsonify({"error": "currentPassword and newPassword required"}), 400

        auth_service.change_password(g.current_user.id, data["currentPassword"], data["newPassword"])
        revoked = session_service.revoke_all_user_sessions(
            g.current_user.id,
            reason="Password changed",
            keep_token=g.auth_token,
        )
        return jsonify({"message": "Password updated", "revokedSessions": revoked}), 200
    except AssetTrackerError as e:
        return domain_error(e)
    except Exception:
        return internal_error("Failed to change password")
