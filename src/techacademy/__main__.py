"""TechAcademy entrypoint.

Run with:
  python -m techacademy
"""

import uvicorn

from techacademy.config import load_settings
from techacademy.core.logging_config import setup_logging


def main() -> None:
    settings = load_settings()
    setup_logging(settings.log_level)
    uvicorn.run(
        "techacademy.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
    )


if __name__ == "__main__":
    main()
