# api/v1/auth.py

from flask import request, g, current_app, jsonify
from functools import wraps
import jwt
from jwt import PyJWKClient
import certifi
import ssl

ALLOWED_ROLES = ['super_admin', 'hr_manager', 'manager', 'user']
ADMIN_ROLES = ['super_admin', 'hr_manager']
APPROVER_ROLES = ['super_admin', 'hr_manager', 'manager']

# Shared JWK client, created on first use when a JWKS URL is configured
jwk_client: PyJWKClient | None = None


def get_jwk_client(jwks_url):
    global jwk_client

    if jwk_client is None or jwk_client.uri != jwks_url:
        ssl_context = ssl.create_default_context(cafile=certifi.where())
        jwk_client = PyJWKClient(jwks_url, cache_keys=True, lifespan=3600, ssl_context=ssl_context)
    return jwk_client


def decode_token(token):
    """
    Verify a Supabase access token.
    ES256 against the JWKS endpoint when SUPABASE_JWKS_URL is set,
    otherwise HS256 with SUPABASE_JWT_SECRET.
    """
    config = current_app.config
    options = {
        "verify_signature": True,
        "verify_exp": True,
        "verify_aud": True,
    }
    if config.get("SUPABASE_JWKS_URL"):
        signing_key = get_jwk_client(config["SUPABASE_JWKS_URL"]).get_signing_key_from_jwt(token)
        return jwt.decode(token, signing_key.key, algorithms=["ES256"],
                          audience=config["JWT_AUDIENCE"], options=options)
    return jwt.decode(token, config["SUPABASE_JWT_SECRET"], algorithms=["HS256"],
                      audience=config["JWT_AUDIENCE"], options=options)


def load_user_from_jwt():
    """
    Validate the bearer token from the Authorization header.
    On success:
        - g.current_user = user ID (sub)
        - g.user_role = role from app_metadata (defaults to 'user')
        - g.employee_id = app_metadata.employee_id, falling back to sub
        - g.department = app_metadata.department
    On failure:
        - g.jwt_error with reason
    Roles here are advisory; the leave core never looks at them.
    """
    auth_header = request.headers.get("Authorization")
    g.current_user = None
    g.user_role = None
    g.employee_id = None
    g.department = None
    g.jwt_error = None

    if not auth_header or not auth_header.startswith("Bearer "):
        g.jwt_error = "Missing or invalid Authorization header"
        return

    token = auth_header.split(" ")[1]

    try:
        decoded_token = decode_token(token)

        g.current_user = decoded_token.get("sub")
        app_metadata = decoded_token.get("app_metadata", {})
        g.user_role = app_metadata.get("role", "user")
        g.employee_id = str(app_metadata.get("employee_id") or g.current_user)
        g.department = app_metadata.get("department")

        current_app.logger.debug(f"Authenticated user: {g.current_user} | Role: {g.user_role}")

    except jwt.ExpiredSignatureError:
        g.jwt_error = "Token has expired"
    except jwt.InvalidAudienceError:
        g.jwt_error = "Invalid audience"
    except jwt.InvalidSignatureError:
        g.jwt_error = "Invalid signature"
    except jwt.InvalidKeyError:
        g.jwt_error = "Invalid key"
    except jwt.DecodeError:
        g.jwt_error = "Token decode error"
    except jwt.PyJWTError as e:
        g.jwt_error = f"JWT verification failed: {str(e)}"
        current_app.logger.warning(f"JWT Error: {e}")


def login_required(f):
    """
    Decorator to protect routes that require authentication.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not g.get("current_user"):
            load_user_from_jwt()

        if not g.current_user:
            error_msg = g.jwt_error or "Authentication required"
            return jsonify({"message": error_msg}), 401

        return f(*args, **kwargs)

    return decorated_function


def role_required(allowed_roles: list[str]):
    """
    Decorator factory to restrict access to specific roles.
    Example usage:
        @role_required(['super_admin', 'hr_manager'])
        def some_route():
            ...
    """
    if isinstance(allowed_roles, str):
        allowed_roles = [allowed_roles]

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not g.get("current_user"):
                load_user_from_jwt()

            if not g.current_user:
                error_msg = g.jwt_error or "Authentication required"
                return jsonify({"message": error_msg}), 401

            if g.user_role not in allowed_roles:
                return jsonify({
                    "message": "Permission denied",
                    "your_role": g.user_role,
                    "required_roles": allowed_roles
                }), 403

            return f(*args, **kwargs)

        return decorated_function

    return decorator


def is_admin():
    return g.get("user_role") in ADMIN_ROLES
