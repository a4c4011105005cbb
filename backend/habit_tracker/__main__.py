"""Run the API with uvicorn: `python -m habit_tracker`."""

import uvicorn

from habit_tracker.config import settings


def main() -> None:
    # One worker: the writer lock lives in this process
    uvicorn.run(
        "habit_tracker.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
        workers=1,
    )


if __name__ == "__main__":
    main()
