"""ASGI entry point: uvicorn unifiedapi.api.app:app"""

import os

import uvicorn

from .factory import create_app

app = create_app()


def main() -> None:
    uvicorn.run(
        "unifiedapi.api.app:app",
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "3001")),
        proxy_headers=True,
        forwarded_allow_ips="*",
    )


if __name__ == "__main__":
    main()
