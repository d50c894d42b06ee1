#!/usr/bin/env python3
"""
Development server startup script for medreport.
Checks the capture backend and starts the FastAPI app with uvicorn.
"""

import argparse
import asyncio
import importlib
import logging
import os
import sys
from pathlib import Path

import uvicorn

from medreport.utils.config import settings

BACKEND_MODULES = {
    "weasyprint": ["weasyprint", "pypdfium2"],
    "playwright": ["playwright.async_api"],
}


def check_capture_backend(backend: str) -> bool:
    """Check that the modules used by the capture backend can be imported."""
    print(f" Checking capture backend '{backend}'...")

    modules = BACKEND_MODULES.get(backend.lower())
    if modules is None:
        print(f"[ERROR] Unknown capture backend '{backend}'")
        return False

    for module in modules:
        try:
            importlib.import_module(module)
        except (ImportError, OSError) as e:
            print(f"[ERROR] {module} is not usable: {e}")
            if backend == "playwright":
                print("   Run `playwright install chromium` after installing the package.")
            return False

    print("[OK] Capture backend available")
    return True


async def run_service_async(
    host: str = "0.0.0.0",
    port: int = 8000,
    reload: bool = True,
    log_level: str = "info",
):
    """Run FastAPI service safely within an existing event loop."""
    logger = logging.getLogger(__name__)
    logger.info(f"Starting medreport service on {host}:{port}")
    logger.info(f"Reload: {reload}")
    logger.info(f"Log level: {log_level}")

    config_uvicorn = uvicorn.Config(
        "medreport.api.main:app",
        host=host,
        port=port,
        log_level=log_level,
        reload=reload,
    )
    server = uvicorn.Server(config_uvicorn)
    await server.serve()


def parse_arguments():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="medreport Development Server")
    parser.add_argument("--host", default=settings.host, help="Host to bind to")
    parser.add_argument("--port", type=int, default=settings.port, help="Port to bind to")
    parser.add_argument(
        "--production", action="store_true", help="Run in production mode (no reload)"
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level.lower(),
        choices=["debug", "info", "warning", "error"],
        help="Log level",
    )
    parser.add_argument(
        "--skip-checks",
        action="store_true",
        help="Skip the capture backend check",
    )
    return parser.parse_args()


def main():
    """Main startup function."""
    args = parse_arguments()

    print(" medreport Development Server")
    print("=" * 60)
    print(f"Mode: {'Production' if args.production else 'Development'}")
    print(f"Host: {args.host}")
    print(f"Port: {args.port}")
    print(f"Capture backend: {settings.capture_backend}")
    print(f"Page size policy: {settings.page_size_policy}")
    print("-" * 60)

    project_root = Path(__file__).parent
    os.chdir(project_root)

    if not args.skip_checks and not check_capture_backend(settings.capture_backend):
        sys.exit(1)

    try:
        asyncio.run(
            run_service_async(
                host=args.host,
                port=args.port,
                reload=not args.production,
                log_level=args.log_level,
            )
        )
    except KeyboardInterrupt:
        print("\nServer stopped")
    except Exception as e:
        print(f"[ERROR] Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
