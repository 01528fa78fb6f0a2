import logging
from typing import AsyncIterator, Callable, List, Optional

import httpx

logger = logging.getLogger(__name__)

UPLOAD_CHUNK_SIZE = 64 * 1024
UPLOAD_SUCCESS_STATUSES = (200, 204)

ProgressCallback = Callable[[int], None]


class ApiError(Exception):
    """A non-success response from the media API or the object store."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def _error_message(response: httpx.Response, fallback: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict) and body.get("error"):
        return body["error"]
    return fallback


class MediaApiClient:
    """
    Async client for the media HTTP API.

    Direct uploads go to the presigned URL through the same underlying
    ``httpx.AsyncClient``; the URL is absolute so the base URL is ignored.
    """

    def __init__(self, base_url: str = "", http: Optional[httpx.AsyncClient] = None, prefix: str = "/api/media"):
        self.http = http or httpx.AsyncClient(base_url=base_url, timeout=30)
        self.prefix = prefix.rstrip("/")

    async def aclose(self):
        await self.http.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def _request(self, method: str, path: str, fallback: str, **kwargs):
        try:
            response = await self.http.request(method, f"{self.prefix}{path}", **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise ApiError(0, fallback) from e

        if response.is_error:
            raise ApiError(response.status_code, _error_message(response, fallback))
        try:
            return response.json()
        except ValueError as e:
            logger.error(f"{method} {path} returned a non-JSON body")
            raise ApiError(response.status_code, fallback) from e

    # -- categories -------------------------------------------------------

    async def list_categories(self) -> List[dict]:
        return await self._request("GET", "/categories", "Failed to fetch categories.")

    async def create_category(self, name: str) -> dict:
        return await self._request("POST", "/categories", "Failed to add category.", json={"name": name})

    async def delete_category(self, category_id: int) -> dict:
        return await self._request("DELETE", f"/categories/{category_id}", "Failed to delete category.")

    # -- images -----------------------------------------------------------

    async def list_images(self, limit: int = 15, offset: int = 0, category_id: Optional[int] = None) -> List[dict]:
        params = {"limit": limit, "offset": offset}
        if category_id is not None:
            params["categoryId"] = category_id
        return await self._request("GET", "/images", "Failed to fetch images.", params=params)

    async def update_image(self, image_id: int, title: Optional[str] = None,
                           category_ids: Optional[List[int]] = None) -> dict:
        body = {}
        if title is not None:
            body["title"] = title
        if category_ids is not None:
            body["categoryIds"] = list(category_ids)
        return await self._request("PATCH", f"/images/{image_id}", "Failed to update image.", json=body)

    # -- storage ----------------------------------------------------------

    async def request_upload_url(self, filename: str, content_type: str, size: int,
                                 title: Optional[str] = None,
                                 category_ids: Optional[List[int]] = None) -> dict:
        body = {"filename": filename, "contentType": content_type, "size": size}
        if title is not None:
            body["title"] = title
        if category_ids:
            body["categoryIds"] = list(category_ids)
        return await self._request("POST", "/s3/upload", "Failed to get presigned URL.", json=body)

    async def delete_image(self, key: str) -> dict:
        return await self._request("DELETE", "/s3/delete", "Failed to remove file from storage.", json={"key": key})

    async def put_object(self, presigned_url: str, data: bytes, content_type: str,
                         on_progress: Optional[ProgressCallback] = None) -> int:
        """PUT ``data`` to a presigned URL, reporting whole-percent progress."""
        total = len(data)

        async def body() -> AsyncIterator[bytes]:
            sent = 0
            for start in range(0, total, UPLOAD_CHUNK_SIZE):
                chunk = data[start:start + UPLOAD_CHUNK_SIZE]
                sent += len(chunk)
                yield chunk
                if on_progress:
                    on_progress(round(sent * 100 / total))

        try:
            response = await self.http.put(
                presigned_url,
                content=body(),
                headers={"Content-Type": content_type, "Content-Length": str(total)},
            )
        except httpx.HTTPError as e:
            logger.error(f"Direct upload failed: {e}")
            raise ApiError(0, "Upload failed") from e

        if response.status_code not in UPLOAD_SUCCESS_STATUSES:
            raise ApiError(response.status_code, f"Upload failed with status: {response.status_code}")
        return response.status_code
