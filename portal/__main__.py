"""
Run the API server:

  python -m portal

Host and port come from HOST and PORT (see portal.core.config).
"""

import uvicorn

from portal.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "portal.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.APP_ENV == "development" and settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
