"""Signing secret management without logger dependencies."""

import os
import secrets
from pathlib import Path

from pydantic import validate_call

JWT_SECRET_FILENAME = "jwt_secret.key"


@validate_call(validate_return=True)
def load_or_generate_jwt_secret(keys_dir: Path = Path("./keys")) -> str:
    """Return the JWT signing secret stored under ``keys_dir``, creating it on first use.

    The file is shared by every worker of a deployment so that tokens issued by
    one worker validate on the others.
    """
    key_path = keys_dir / JWT_SECRET_FILENAME
    os.makedirs(keys_dir, exist_ok=True)

    if key_path.exists():
        key = key_path.read_text().strip()
        if key:
            return key
        key_path.unlink()

    key = generate_jwt_secret()
    # O_EXCL so that concurrent first starts agree on a single secret
    try:
        fd = os.open(key_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
    except FileExistsError:
        return key_path.read_text().strip()
    with os.fdopen(fd, "w") as f:
        f.write(key)
    return key


def generate_jwt_secret() -> str:
    return secrets.token_urlsafe(48)
