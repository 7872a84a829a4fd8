"""Entry point: python -m timelapse_server"""

import uvicorn
from .config import get_settings


def main():
    settings = get_settings()
    uvicorn.run(
        "timelapse_server.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
