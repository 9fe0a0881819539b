"""Entry point running the records service under uvicorn."""

from __future__ import annotations

from shared.config.settings import get_settings

from services.records.app import app, get_app

__all__ = ["app", "get_app", "run"]


def run() -> None:
    import uvicorn

    settings = get_settings().app
    uvicorn.run("services.records.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":  # pragma: no cover
    run()
