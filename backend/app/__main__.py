"""Allows `python -m app` to start the server."""

from app.server import run

if __name__ == "__main__":
    run()
