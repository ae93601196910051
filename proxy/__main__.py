"""
Run the proxy with uvicorn: `python -m proxy` or `monday-write-proxy`.
"""

import os

import uvicorn


def main() -> None:
    uvicorn.run(
        "proxy.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        log_level="debug" if os.getenv("DEBUG", "false").lower() == "true" else "info",
    )


if __name__ == "__main__":
    main()
