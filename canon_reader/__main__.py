import uvicorn

from canon_reader.core.settings import Settings


def main() -> None:
    settings = Settings()
    uvicorn.run("canon_reader.main:app", host="0.0.0.0", port=settings.READER_PORT)


if __name__ == "__main__":
    main()
