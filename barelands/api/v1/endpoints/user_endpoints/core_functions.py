from datetime import datetime, timedelta, timezone

import bcrypt
import jwt
from pydantic import validate_call

from barelands.api.v1.configs.logging_init import logger
from barelands.api.v1.configs.settings_models import AuthConfig
from barelands.api.v1.errors import UnauthenticatedError
from barelands.models.models.users import AdminUser, Token, TokenData


@validate_call(validate_return=True)
def _hash_password(password: str) -> str:
    # Generate a salt
    salt = bcrypt.gensalt()
    # Hash the password with the salt
    hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    return hashed.decode("utf-8")


@validate_call(validate_return=True)
def _verify_password(stored_hash: str, password: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), stored_hash.encode("utf-8"))
    except ValueError:
        logger.error("Stored admin password hash is not a valid bcrypt hash")
        return False


def _check_admin_credentials(auth: AuthConfig, email: str, password: str) -> bool:
    """
    Check the submitted credentials against the configured admin account.

    Returns False whenever no password hash is configured.
    """
    if not auth.admin_password_hash:
        logger.warning("Login attempted but no admin password hash is configured")
        return False
    if email.strip().lower() != auth.admin_email.lower():
        logger.info(f"Login rejected for unknown user {email}")
        return False
    return _verify_password(auth.admin_password_hash, password)


def create_access_token(auth: AuthConfig, email: str) -> Token:
    expire = datetime.now(timezone.utc) + timedelta(hours=auth.token_lifetime_hours)
    token_data = TokenData(sub=email, exp=expire)
    encoded_jwt = jwt.encode(
        token_data.model_dump(), auth.jwt_secret, algorithm=auth.jwt_algorithm
    )
    logger.debug(f"Token issued for {email}, expires {expire.isoformat()}")
    return Token(access_token=encoded_jwt, expire_datetime=expire)


def decode_token(auth: AuthConfig, token: str) -> TokenData:
    """
    Validate ``token`` and return its claims.

    Raises:
        UnauthenticatedError: if the token is expired, malformed or not issued for the admin
    """
    try:
        payload = jwt.decode(token, auth.jwt_secret, algorithms=[auth.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise UnauthenticatedError("Session expired")
    except jwt.PyJWTError as e:
        logger.debug(f"Rejected token: {e}")
        raise UnauthenticatedError("Invalid token")

    token_data = TokenData.model_validate(payload)
    if token_data.sub.lower() != auth.admin_email.lower():
        raise UnauthenticatedError("Invalid token")
    return token_data


def _admin_from_token(auth: AuthConfig, token: str) -> AdminUser:
    token_data = decode_token(auth, token)
    return AdminUser(email=token_data.sub)
