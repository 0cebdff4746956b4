import os

import uvicorn

from quick_entry.app import app

__all__ = ["app", "run"]


def run() -> None:
    uvicorn.run(
        "quick_entry.app:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        log_config=None,
    )


if __name__ == "__main__":
    run()
