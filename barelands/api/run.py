import uvicorn

from barelands.api.logging_config import uvicorn_log_config
from barelands.api.v1.configs.config import settings


def main(reload: bool | None = None):
    """
    Entry point for running the Barelands API server.
    """
    reload = settings.fastapi.reload if reload is None else reload
    uvicorn.run(
        "barelands.api.main:app",
        host=settings.fastapi.host,
        port=settings.fastapi.port,
        reload=reload,
        workers=None if reload else settings.fastapi.workers,
        log_config=uvicorn_log_config(),
    )


if __name__ == "__main__":
    main()
