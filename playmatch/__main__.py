"""Run the API server: python -m playmatch [--host HOST] [--port PORT]"""

import argparse

import uvicorn

from playmatch.app import create_app
from playmatch.logging_setup import setup_logging


def main() -> None:
    parser = argparse.ArgumentParser(description="Playmatch API server")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--db", default=None, help="SQLite database path")
    parser.add_argument("--log-level", default=None)
    args = parser.parse_args()

    setup_logging(args.log_level)
    uvicorn.run(create_app(args.db), host=args.host, port=args.port, log_config=None)


if __name__ == "__main__":
    main()
