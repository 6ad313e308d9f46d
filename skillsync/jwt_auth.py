# jwt_auth.py
import logging
import os
from functools import wraps
from typing import Callable, Dict

import jwt
from flask import g, jsonify, request
from jwt import PyJWKClient

from skillsync.extensions import db
from skillsync.models import UserProfile

logger = logging.getLogger(__name__)

ALGORITHMS = ["RS256"]

# JWKS clients cache signing keys; keep one per URL for the process lifetime.
_JWK_CLIENTS: Dict[str, PyJWKClient] = {}


def _auth_error(error: str, status: int):
    return jsonify({"success": False, "error": error}), status


def _get_jwk_client(jwks_url: str) -> PyJWKClient:
    client = _JWK_CLIENTS.get(jwks_url)
    if client is None:
        client = PyJWKClient(jwks_url)
        _JWK_CLIENTS[jwks_url] = client
    return client


def _decode_token(token: str) -> dict:
    """Verify a bearer token against the identity provider's JWKS.

    Raises:
        RuntimeError: If AUTH0_DOMAIN or AUTH0_AUDIENCE is not configured.
        jwt.InvalidTokenError: If the token fails verification.

    Returns:
        dict: The verified claims.
    """
    domain = os.getenv("AUTH0_DOMAIN")
    aud = os.getenv("AUTH0_AUDIENCE")
    if not domain or not aud:
        raise RuntimeError("AUTH0_DOMAIN and AUTH0_AUDIENCE must be configured")

    # e.g. https://skillsync.eu.auth0.com -> skillsync.eu.auth0.com
    domain_hostname = domain.split("://")[-1].rstrip("/")
    iss = f"https://{domain_hostname}/"
    jwks_url = f"https://{domain_hostname}/.well-known/jwks.json"

    header = jwt.get_unverified_header(token)
    if header.get("alg") not in ALGORITHMS:
        raise jwt.InvalidAlgorithmError("unexpected_alg")
    typ = (header.get("typ") or "").lower()
    if typ and typ not in ("jwt", "at+jwt"):
        raise jwt.InvalidTokenError("unexpected_token_type")

    signing_key = _get_jwk_client(jwks_url).get_signing_key_from_jwt(token).key
    return jwt.decode(
        token,
        signing_key,
        algorithms=ALGORITHMS,
        audience=aud,
        issuer=iss,
        leeway=60,
    )


def _ensure_user_profile(payload: dict) -> UserProfile:
    """Upsert the caller's profile from verified claims so resumes have an owner row."""
    sub = payload.get("sub")
    if not sub:
        raise ValueError("payload must include 'sub'")
    profile = db.session.get(UserProfile, sub)
    changed = profile is None
    if profile is None:
        profile = UserProfile(id=sub)
        db.session.add(profile)
    for attr in ("email", "name"):
        value = payload.get(attr)
        if value and getattr(profile, attr) != value:
            setattr(profile, attr, value)
            changed = True
    if changed:
        db.session.commit()
    return profile


def require_jwt(hydrate: bool = False) -> Callable:
    """Require a verified JWT Bearer token.

    Args:
        hydrate (bool, optional): Whether to upsert the caller's UserProfile. Defaults to False.

    Returns:
        Callable: The decorator.
    """

    def decorator(fn: Callable) -> Callable:
        @wraps(fn)
        def wrapped(*args, **kwargs):
            auth_header = request.headers.get("Authorization", "")
            if not auth_header.startswith("Bearer "):
                return _auth_error("missing_or_invalid_authorization", 401)

            token = auth_header.split(" ", 1)[1]
            try:
                payload = _decode_token(token)
            except jwt.ExpiredSignatureError:
                return _auth_error("token_expired", 401)
            except jwt.InvalidTokenError:
                return _auth_error("invalid_token", 401)
            except Exception as e:
                logger.warning(f"Token verification failed: {e}")
                return _auth_error("auth_failure", 401)

            g.jwt_payload = payload
            g.user_sub = payload.get("sub")
            if not g.user_sub:
                return _auth_error("User not authenticated", 401)

            if hydrate:
                g.user_profile = _ensure_user_profile(payload)

            return fn(*args, **kwargs)

        return wrapped

    return decorator
