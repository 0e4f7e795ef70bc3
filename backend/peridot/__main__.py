"""Run the API server: ``python -m peridot``."""

import uvicorn

from peridot.config import settings


def main() -> None:
    uvicorn.run(
        "peridot.main:create_app",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
