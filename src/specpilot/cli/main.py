import argparse

import uvicorn


def main(argv=None):
    parser = argparse.ArgumentParser(prog="specpilot", description="Run the SpecPilot API server")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--no-reload", action="store_true", help="disable auto-reload")
    args = parser.parse_args(argv)

    uvicorn.run(
        "specpilot.main:app",
        host=args.host,
        port=args.port,
        reload=not args.no_reload,
    )


if __name__ == "__main__":
    main()
