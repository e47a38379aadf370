"""
AccounTech Voucher Service
Application Runner
"""

import uvicorn
import argparse
from accountech.config import config
from accountech.utils.constants import APP_NAME, APP_VERSION


def main():
    parser = argparse.ArgumentParser(description=APP_NAME)
    parser.add_argument("--host", default=config.api.host, help="Host to bind")
    parser.add_argument("--port", type=int, default=config.api.port, help="Port to bind")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload")

    args = parser.parse_args()

    print(f"""
    ============================================================
    |         {APP_NAME} v{APP_VERSION}
    ============================================================
    |  Server:   http://{args.host}:{args.port}
    |  Docs:     http://{args.host}:{args.port}/docs
    |  Database: {config.database.path}
    ============================================================
    """)

    uvicorn.run(
        "accountech.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload
    )


if __name__ == "__main__":
    main()
