"""
HTTP upload transport.

Sends one queue item to the upload endpoint as a multipart POST and
classifies the response into a result or an UploadError.
"""
from pathlib import Path
from typing import Any, AsyncGenerator, Dict, Optional
from urllib.parse import urlparse
import json
import logging
import time

import aiofiles
import aiohttp

from ...exceptions import UploadError, UploadErrorKind
from ..config import QueueConfig
from ..models import QueueItem
from ..protocols import ByteProgressCallback

CSRF_FIELD = '_csrf'
CSRF_HEADER = 'X-CSRF-Token'

STATUS_UNAUTHORIZED = 401
STATUS_TIMEOUT = 408
STATUS_LIMIT_EXCEEDED = 413

MSG_UNAUTHORIZED = 'Unauthorized - please login again'
MSG_TIMEOUT = 'Upload timeout - file may be too large'
MSG_LIMIT_EXCEEDED = 'Storage limit exceeded'
MSG_INVALID_RESPONSE = 'Invalid server response'
MSG_UPLOAD_FAILED = 'Upload failed'
MSG_NETWORK = 'Network error'


def _is_absolute(url: str) -> bool:
    parsed = urlparse(url)
    return bool(parsed.scheme and parsed.netloc)


def _parse_json(text: str) -> Optional[Dict[str, Any]]:
    """Returns the body as a dict, or None if it is not a JSON object."""
    try:
        body = json.loads(text)
    except (ValueError, TypeError):
        return None
    return body if isinstance(body, dict) else None


def limit_exceeded_message(body: Optional[Dict[str, Any]]) -> str:
    """
    Build the message for a storage/size limit rejection.

    Example:
        >>> limit_exceeded_message({
        ...     'message': 'Storage limit exceeded',
        ...     'formatted': {'usage': '10GB', 'limit': '10GB'}
        ... })
        'Storage limit exceeded\\nCurrent: 10GB\\nLimit: 10GB'
    """
    if body is None:
        return MSG_LIMIT_EXCEEDED
    message = body.get('message') or MSG_LIMIT_EXCEEDED
    formatted = body.get('formatted')
    if isinstance(formatted, dict):
        usage = formatted.get('usage', '')
        limit = formatted.get('limit', '')
        message += f"\nCurrent: {usage}\nLimit: {limit}"
    return message


def classify_response(status: int, text: str) -> Dict[str, Any]:
    """
    Classify an upload response.

    Args:
        status: HTTP status code
        text: Response body

    Returns:
        Parsed body when the server confirms success

    Raises:
        UploadError: For every other outcome
    """
    body = _parse_json(text)

    if 200 <= status < 300:
        if body is None:
            raise UploadError(MSG_INVALID_RESPONSE, UploadErrorKind.MALFORMED, status)
        if body.get('success'):
            return body
        raise UploadError(
            body.get('error') or MSG_UPLOAD_FAILED, UploadErrorKind.REJECTED, status
        )

    if status == STATUS_UNAUTHORIZED:
        raise UploadError(MSG_UNAUTHORIZED, UploadErrorKind.UNAUTHORIZED, status)

    if status == STATUS_LIMIT_EXCEEDED:
        raise UploadError(
            limit_exceeded_message(body), UploadErrorKind.LIMIT_EXCEEDED, status
        )

    if status == STATUS_TIMEOUT:
        raise UploadError(MSG_TIMEOUT, UploadErrorKind.TIMEOUT, status)

    if body is not None and body.get('error'):
        raise UploadError(str(body['error']), UploadErrorKind.REJECTED, status)
    raise UploadError(f"HTTP {status}", UploadErrorKind.HTTP, status)


class HttpTransport:
    """
    Uploads queue items with aiohttp.

    Reuses one HTTP session for all uploads of a queue.

    Responsibilities:
    - Build the multipart form (file, anti-forgery token, extra fields)
    - Stream the file and report byte progress
    - Classify the response
    """

    def __init__(
        self,
        config: QueueConfig,
        session: Optional[aiohttp.ClientSession] = None
    ):
        """
        Initialize transport.

        Args:
            config: Queue configuration (endpoint, field names, token)
            session: Optional shared session; closed by its owner, not here

        Raises:
            ValueError: If the upload URL cannot be resolved without a session base URL
        """
        if session is None and not config.transport.base_url and not _is_absolute(config.upload_url):
            raise ValueError(
                f"Upload URL '{config.upload_url}' is relative; "
                "use an absolute URL or set TransportConfig.base_url"
            )

        self._config = config
        self._session = session
        self._owns_session = False
        self._logger = logging.getLogger('mediaqueue.queue.transport')

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session."""
        if self._session is None:
            settings = self._config.transport
            self._session = aiohttp.ClientSession(
                connector=aiohttp.TCPConnector(**settings.get_connector_kwargs()),
                **settings.get_session_kwargs()
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close session if we own it."""
        if self._owns_session and self._session:
            await self._session.close()
            self._session = None
            self._owns_session = False

    async def _read_blocks(self, item: QueueItem) -> AsyncGenerator[bytes, None]:
        block_size = self._config.transport.read_block_size

        if isinstance(item.payload, Path):
            async with aiofiles.open(item.payload, 'rb') as f:
                while True:
                    block = await f.read(block_size)
                    if not block:
                        break
                    yield block
        else:
            data = item.payload or b''
            for start in range(0, len(data), block_size):
                yield data[start:start + block_size]

    async def _stream(
        self,
        item: QueueItem,
        on_progress: ByteProgressCallback
    ) -> AsyncGenerator[bytes, None]:
        """Yield file blocks, reporting progress once each block is written."""
        sent = 0
        blocks = self._read_blocks(item)
        try:
            async for block in blocks:
                yield block
                sent += len(block)
                on_progress(sent, item.size)
        finally:
            await blocks.aclose()

    def _build_form(
        self,
        item: QueueItem,
        stream: AsyncGenerator[bytes, None]
    ) -> aiohttp.FormData:
        """Build the multipart body for one attempt."""
        config = self._config
        form = aiohttp.FormData()
        form.add_field(
            config.file_field_name,
            stream,
            filename=item.name,
            content_type=item.mime_type or 'application/octet-stream'
        )

        if config.csrf_token:
            form.add_field(CSRF_FIELD, config.csrf_token)

        # Supplier runs per attempt so values may change between retries
        if config.extra_data is not None:
            extra = config.extra_data()
            if isinstance(extra, dict):
                for key, value in extra.items():
                    form.add_field(str(key), '' if value is None else str(value))

        return form

    def _check_readable(self, item: QueueItem) -> None:
        if isinstance(item.payload, Path) and not item.payload.is_file():
            raise UploadError(
                f"Could not read file: {item.payload} not found",
                UploadErrorKind.READ
            )

    async def upload(
        self,
        item: QueueItem,
        on_progress: ByteProgressCallback
    ) -> Dict[str, Any]:
        """
        Upload a single item.

        Args:
            item: Queue item to send
            on_progress: Called with (bytes_sent, total_bytes)

        Returns:
            Server response body

        Raises:
            UploadError: If the upload failed or the server rejected it
            asyncio.CancelledError: If the task was cancelled
        """
        self._check_readable(item)

        headers = {}
        if self._config.csrf_token:
            headers[CSRF_HEADER] = self._config.csrf_token

        proxy = self._config.transport.proxy
        session = await self._get_session()
        stream = self._stream(item, on_progress)
        form = self._build_form(item, stream)

        upload_start = time.time()
        self._logger.debug(f"POST {self._config.upload_url} <- {item.name} ({item.size_display})")

        try:
            async with session.post(
                self._config.upload_url,
                data=form,
                headers=headers,
                proxy=proxy.to_aiohttp_proxy() if proxy else None
            ) as response:
                status = response.status
                raw = await response.read()
        except aiohttp.ClientError as e:
            elapsed = time.time() - upload_start
            self._logger.warning(f"{item.name}: network error after {elapsed:.2f}s: {e}")
            raise UploadError(MSG_NETWORK, UploadErrorKind.NETWORK) from e
        finally:
            # Release the file handle now; a body writer still inside the
            # generator closes it itself when cancelled
            if not stream.ag_running:
                await stream.aclose()

        elapsed = time.time() - upload_start
        self._logger.debug(f"{item.name}: HTTP {status} in {elapsed:.2f}s")
        return classify_response(status, raw.decode('utf-8', errors='replace'))
