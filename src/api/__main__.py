"""
Run the phonebook API with uvicorn.
Run: python -m api (from repo root, with .env or env vars set).
"""
import os

import uvicorn


def main() -> None:
    host = os.environ.get("HOST", "127.0.0.1").strip()
    port = int(os.environ.get("PORT", "3001").strip() or 3001)
    uvicorn.run("api.main:app", host=host, port=port)


if __name__ == "__main__":
    main()
