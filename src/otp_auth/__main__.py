"""Run the service with ``python -m otp_auth``."""

import uvicorn

from otp_auth.config import settings


def main() -> None:
    uvicorn.run(
        "otp_auth.main:app",
        host=settings.host,
        port=settings.port,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    main()
