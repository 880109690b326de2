import uvicorn

from finbot.config import settings


def main():
    uvicorn.run("finbot.main:app", host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    main()
