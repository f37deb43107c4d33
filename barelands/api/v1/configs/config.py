from barelands.api.v1.configs.logging_init import initialize_loggers, logger
from barelands.api.v1.configs.settings_models import Settings

# Settings
# Overwrite priority: environment variables > constructor arguments > default values
settings = Settings()

# Initialize all loggers with the verbosity level from settings
initialize_loggers(verbose_level=settings.logging.verbosity_level)

logger.debug(f"Settings: {settings}")
DATA_PATH = settings.storage.data_path
UPLOADS_PATH = settings.storage.uploads_path
logger.debug(f"Catalog document: {DATA_PATH}")
logger.debug(f"Upload directory: {UPLOADS_PATH}")

if not settings.auth.admin_password_hash:
    logger.warning(
        "BARELANDS_AUTH_ADMIN_PASSWORD_HASH is not set: admin login is disabled "
        "(generate one with `barelands-cli hash-password`)"
    )
if not settings.revalidation.secret:
    logger.warning("BARELANDS_REVALIDATION_SECRET is not set: the revalidate endpoint is disabled")
