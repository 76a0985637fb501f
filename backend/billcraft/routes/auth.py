# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/billcraft/routes/auth.py
"""
Authentication API routes

- Email + password sign up / sign in
- Email one-time code sign in (also the password reset path)
- Bearer session tokens (see session_service)
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..services import auth_service
from ..services import session_service
from ..services.auth_service import PasswordValidationError
from ..validation import ConflictError, ValidationError
from ..decorators import require_auth, require_user


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _session_response(user, status: int = 200, message: str = "Login successful"):
    session, token = session_service.create_session(
        user_id=user.id,
        user_agent=request.headers.get("User-Agent"),
        ip_address=request.remote_addr,
    )
    return jsonify({
        "user": user.to_dict(),
        "token": token,
        "session": session.to_dict(),
        "message": message,
    }), status


@auth_bp.post("/signup")
def signup_route():
    """Create an account and sign it in."""
    data = request.get_json(silent=True) or {}
    try:
        user = auth_service.sign_up(data.get("email"), data.get("password"))
        return _session_response(user, 201, "Account created")
    except PasswordValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to sign up user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/login")
def login_route():
    """
    Authenticate with email and password and create a session token.
    Token must be included in Authorization header for protected routes.
    """
    try:
        data = request.get_json(silent=True) or {}
        email = data.get("email")
        password = data.get("password")

        if not all([email, password]):
            return jsonify({"error": "email and password required"}), 400

        user = auth_service.authenticate(email, password)
        if not user:
            return jsonify({"error": "Invalid credentials"}), 401

        return _session_response(user)

    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/logout")
def logout_route():
    """
    Revoke session token (logout).

    Expects Authorization header: Bearer <token>
    """
    try:
        auth_header = request.headers.get("Authorization")
        if not auth_header or not auth_header.startswith("Bearer "):
            return jsonify({"error": "Authorization header required"}), 401

        token = auth_header.split(" ", 1)[1]

        if not session_service.revoke_session(token, reason="User logout"):
            return jsonify({"error": "Invalid or expired token"}), 401

        return jsonify({"message": "Logout successful"}), 200

    except Exception:
        current_app.logger.exception("Failed to logout user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.get("/me")
@require_auth
@require_user
def me_route():
    return jsonify({"user": g.current_user.to_dict(), "account_id": g.account_id})


@auth_bp.post("/otp/request")
def otp_request_route():
    """
    Send a 6-digit sign-in code.

    The response is the same whether or not the email has an account.
    With EXPOSE_ONE_TIME_CODES (development) the code is echoed back.
    """
    data = request.get_json(silent=True) or {}
    try:
        code = auth_service.request_one_time_code(data.get("email"))
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to issue one-time code")
        return jsonify({"error": "Internal server error"}), 500

    body = {"message": "If an account exists for this email, a code has been sent"}
    if code and current_app.config.get("EXPOSE_ONE_TIME_CODES"):
        body["code"] = code
    return jsonify(body), 200


@auth_bp.post("/otp/verify")
def otp_verify_route():
    data = request.get_json(silent=True) or {}
    email = data.get("email")
    code = data.get("code")
    if not email or not code:
        return jsonify({"error": "email and code required"}), 400

    try:
        user = auth_service.verify_one_time_code(email, str(code))
        if not user:
            return jsonify({"error": "Invalid or expired code"}), 401
        return _session_response(user)
    except Exception:
        current_app.logger.exception("Failed to verify one-time code")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/password")
@require_auth
@require_user
def set_password_route():
    """
    Set a new password. Every other session of the user is revoked; the
    calling session stays valid.
    """
    data = request.get_json(silent=True) or {}
    try:
        auth_service.set_password(
            g.current_user.id,
            data.get("new_password"),
            keep_session_id=g.session_context.session.id,
        )
    except PasswordValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to set password")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"message": "Password updated"}), 200
