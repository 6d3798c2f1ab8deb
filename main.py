"""Simple entrypoint to run the closet backend locally."""

import os

import uvicorn


def main() -> None:
    uvicorn.run("server.api:app", host="0.0.0.0", port=int(os.getenv("PORT", "3000")), reload=False)


if __name__ == "__main__":
    main()
