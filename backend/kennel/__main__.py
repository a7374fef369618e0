"""Run the API with uvicorn: python -m kennel"""

import uvicorn

from kennel.config import settings


def main() -> None:
    uvicorn.run(
        "kennel.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
