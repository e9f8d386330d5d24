"""zenbatu entrypoint.

Run with:
  python -m zenbatu
"""

import uvicorn

from zenbatu.config import load_settings


def main() -> None:
    settings = load_settings()
    uvicorn.run(
        "zenbatu.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
    )


if __name__ == "__main__":
    main()
