import uvicorn

from universal_gateway.core.config import settings


def main() -> None:
    uvicorn.run(
        "universal_gateway.main:app",
        host=settings.app_host,
        port=settings.app_port,
        log_config=None,  # keep the handlers installed by setup_logging
    )


if __name__ == "__main__":
    main()
