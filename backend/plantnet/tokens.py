from datetime import timedelta
from typing import Dict, Mapping, Optional

from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError

from .documents import normalize_email
from .errors import BadRequest, ExpiredToken, InvalidToken


def issue_token(
    identity: Mapping, expires_delta: Optional[timedelta] = None
) -> str:
    """Sign a session token for ``identity["email"]``.

    The token carries identity only; roles are always read from storage.
    Lifetime defaults to ``JWT_ACCESS_TOKEN_EXPIRES``.
    """
    if not isinstance(identity, Mapping):
        raise BadRequest("email is required")
    email = normalize_email(identity.get("email"))
    if not email:
        raise BadRequest("email is required")

    return create_access_token(
        identity=email,
        additional_claims={"email": email},
        expires_delta=expires_delta,
    )


def verify_token(token: str) -> Dict[str, object]:
    try:
        claims = decode_token(token)
    except ExpiredSignatureError as exc:
        raise ExpiredToken("session token has expired") from exc
    except (InvalidTokenError, JWTExtendedException) as exc:
        raise InvalidToken(f"invalid session token: {exc}") from exc

    email = normalize_email(claims.get("email") or claims.get("sub"))
    if not email:
        raise InvalidToken("session token carries no identity")
    return {"email": email, "exp": claims.get("exp")}
