import os
import stat

from barelands.api.v1.key_utils import (
    JWT_SECRET_FILENAME,
    generate_jwt_secret,
    load_or_generate_jwt_secret,
)


class TestJwtSecret:
    def test_generates_secret_file(self, tmp_path):
        keys_dir = tmp_path / "keys"

        secret = load_or_generate_jwt_secret(keys_dir=keys_dir)

        key_path = keys_dir / JWT_SECRET_FILENAME
        assert key_path.read_text() == secret
        assert len(secret) >= 48
        assert stat.S_IMODE(os.stat(key_path).st_mode) == 0o600

    def test_existing_secret_is_reused(self, tmp_path):
        (tmp_path / JWT_SECRET_FILENAME).write_text("existing-secret\n")

        assert load_or_generate_jwt_secret(keys_dir=tmp_path) == "existing-secret"

    def test_empty_file_is_regenerated(self, tmp_path):
        (tmp_path / JWT_SECRET_FILENAME).write_text("")

        secret = load_or_generate_jwt_secret(keys_dir=tmp_path)

        assert secret
        assert (tmp_path / JWT_SECRET_FILENAME).read_text() == secret

    def test_generated_secrets_differ(self):
        assert generate_jwt_secret() != generate_jwt_secret()
