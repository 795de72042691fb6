import uvicorn

from llm_proxy.core.config import settings


def main() -> None:
    uvicorn.run("llm_proxy.main:app", host=settings.app_host, port=settings.app_port, log_config=None)


if __name__ == "__main__":
    main()
