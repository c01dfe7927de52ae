from pathlib import Path
from typing import Optional, Union

import httpx
from pydantic import BaseModel, ValidationError

from src.core.logger import logger
from src.core.exceptions import UploadError


class UploadResult(BaseModel):
    message: str
    filename: str
    path: str


class UploadService:
    """Client for the external multipart upload endpoint."""

    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._url = url
        self._timeout = timeout
        self._transport = transport

    async def upload_image(
        self,
        source: Union[str, Path],
        content_type: str = "image/jpeg",
        name: str = "upload.jpg",
    ) -> UploadResult:
        return await self._upload(Path(source), content_type, name, "image")

    async def upload_document(
        self,
        source: Union[str, Path],
        content_type: str = "application/octet-stream",
        name: str = "upload.pdf",
    ) -> UploadResult:
        return await self._upload(Path(source), content_type, name, "document")

    async def _upload(
        self, source: Path, content_type: str, name: str, label: str
    ) -> UploadResult:
        try:
            content = source.read_bytes()
        except OSError as e:
            logger.error(f"Error reading {label} {source}: {e}")
            raise UploadError(f"Cannot read {label}: {source}") from e

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    self._url, files={"file": (name, content, content_type)}
                )
                response.raise_for_status()
                result = UploadResult.model_validate(response.json())
        except httpx.HTTPStatusError as e:
            logger.error(f"Error uploading {label}: {e.response.status_code}")
            raise UploadError(
                f"Upload failed with status: {e.response.status_code}"
            ) from e
        except (httpx.HTTPError, ValueError, ValidationError) as e:
            logger.error(f"Error uploading {label}: {e}")
            raise UploadError(f"Failed to upload {label}: {str(e)}") from e

        logger.info(f"Uploaded {label} as {result.filename}")
        return result
