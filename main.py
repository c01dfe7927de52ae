"""Main entry point for Jonda Chat.

Supports running:
- FastAPI WebSocket server
- One-off uploads to the configured upload endpoint
"""

import argparse
import asyncio
import sys

from src.core.logger import logger


def run_api():
    """Run the FastAPI WebSocket server."""
    logger.info("Starting FastAPI server...")
    import uvicorn
    from src.core.settings import settings

    uvicorn.run(
        "src.api.main:app",
        host=settings.api.API_HOST,
        port=settings.api.API_PORT,
        workers=settings.api.API_WORKERS,
        reload=True,
        log_level="info",
    )


def run_upload(kind: str, path: str) -> int:
    """Upload an image or document and print where the server stored it."""
    from src.core.dependencies import get_container
    from src.core.exceptions import UploadError

    service = get_container().get_upload_service()
    upload = service.upload_image if kind == "image" else service.upload_document

    try:
        result = asyncio.run(upload(path))
    except UploadError as e:
        logger.error(f"Upload failed: {e}")
        return 1

    print(f"{result.message}: {result.filename} -> {result.path}")
    return 0


def main():
    """Main entry point with CLI argument parsing."""
    parser = argparse.ArgumentParser(
        description="Jonda Chat - text and voice chat sessions"
    )
    subparsers = parser.add_subparsers(dest="mode")

    subparsers.add_parser("api", help="Run the FastAPI WebSocket server (default)")

    upload_parser = subparsers.add_parser("upload", help="Upload a file")
    upload_parser.add_argument("kind", choices=["image", "document"])
    upload_parser.add_argument("path", help="Path of the file to upload")

    args = parser.parse_args()
    mode = args.mode or "api"

    logger.info(f"Starting Jonda Chat in '{mode}' mode...")

    if mode == "upload":
        sys.exit(run_upload(args.kind, args.path))
    run_api()


if __name__ == "__main__":
    main()
