"""Run the attendance webhook server."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from attendance_engine.config import configure_logging, get_settings


def main() -> None:
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run("attendance_engine.webhook:create_app", factory=True, host="0.0.0.0", port=settings.app_port)


if __name__ == "__main__":
    main()
