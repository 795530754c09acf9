"""
Backend startup: python -m creatorhub [--host HOST] [--port PORT] [--reload]
"""
import argparse

import uvicorn


def main() -> None:
    ap = argparse.ArgumentParser(prog="creatorhub")
    ap.add_argument("--host", default="0.0.0.0")
    ap.add_argument("--port", type=int, default=8000)
    ap.add_argument("--reload", action="store_true")
    args = ap.parse_args()

    print(f"[creatorhub] Server: http://{args.host}:{args.port}")
    uvicorn.run(
        "creatorhub.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="info",
    )


if __name__ == "__main__":
    main()
