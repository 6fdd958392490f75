"""
Upload queue configuration module.

Provides the immutable per-queue configuration and the HTTP session
settings used by the transport.
"""
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, Callable, Tuple
import ssl

MIN_CONCURRENT_UPLOADS = 1
MAX_CONCURRENT_UPLOADS = 5
DEFAULT_CONCURRENT_UPLOADS = 3

DEFAULT_UPLOAD_URL = '/api/videos/upload'
DEFAULT_FILE_FIELD = 'video'
DEFAULT_EXTENSIONS = ('.mp4', '.avi', '.mov')
DEFAULT_MIME_TYPES = ('video/mp4', 'video/avi', 'video/quicktime')

ExtraDataSupplier = Callable[[], Optional[Dict[str, Any]]]


def clamp_concurrency(value: Any) -> int:
    """Clamp a requested concurrency limit to [1, 5]."""
    try:
        count = int(value)
    except (TypeError, ValueError):
        return DEFAULT_CONCURRENT_UPLOADS
    return max(MIN_CONCURRENT_UPLOADS, min(count, MAX_CONCURRENT_UPLOADS))


def _normalize_extension(ext: str) -> str:
    ext = ext.strip().lower()
    return ext if ext.startswith('.') else f'.{ext}'


@dataclass(frozen=True)
class ProxyConfig:
    """
    Proxy configuration.

    Supports HTTP, HTTPS, and SOCKS proxies.
    """
    url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None

    def to_aiohttp_proxy(self) -> Optional[str]:
        """Convert to aiohttp proxy format."""
        if not self.url:
            return None

        if self.username and self.password and '://' in self.url:
            protocol, rest = self.url.split('://', 1)
            return f"{protocol}://{self.username}:{self.password}@{rest}"

        return self.url


@dataclass(frozen=True)
class SSLConfig:
    """SSL/TLS configuration for the upload endpoint."""
    verify: bool = True
    ca_file: Optional[str] = None
    check_hostname: bool = True

    def create_ssl_context(self):
        """Create SSL context from configuration (False disables verification)."""
        if not self.verify:
            return False

        context = ssl.create_default_context()
        if self.ca_file:
            context.load_verify_locations(self.ca_file)
        context.check_hostname = self.check_hostname
        return context


@dataclass(frozen=True)
class TransportConfig:
    """
    HTTP session settings.

    No total timeout is applied: large files may take arbitrarily long
    and only the server reports a timeout.
    """
    base_url: Optional[str] = None
    user_agent: str = 'mediaqueue/1.0.0'
    extra_headers: Dict[str, str] = field(default_factory=dict)
    ssl: SSLConfig = field(default_factory=SSLConfig)
    proxy: Optional[ProxyConfig] = None
    limit: int = 10
    read_block_size: int = 64 * 1024

    def get_connector_kwargs(self) -> Dict[str, Any]:
        """Get kwargs for aiohttp TCPConnector."""
        return {
            'limit': self.limit,
            'ssl': self.ssl.create_ssl_context(),
        }

    def get_session_kwargs(self) -> Dict[str, Any]:
        """Get kwargs for aiohttp ClientSession."""
        import aiohttp
        kwargs = {
            'headers': {'User-Agent': self.user_agent, **self.extra_headers},
            'timeout': aiohttp.ClientTimeout(total=None),
        }
        # Relative upload URLs such as '/api/videos/upload' resolve against it
        if self.base_url:
            kwargs['base_url'] = self.base_url
        return kwargs


@dataclass(frozen=True)
class QueueConfig:
    """
    Configuration for one upload queue instance.

    Attributes:
        upload_url: Endpoint receiving the multipart POST
        file_field_name: Multipart field carrying the file
        allowed_extensions: Accepted extensions (with leading dot, any case)
        allowed_mime_types: Accepted declared MIME types
        csrf_token: Anti-forgery token sent as '_csrf' part and header
        concurrent_uploads: Concurrency limit, clamped to [1, 5]
        extra_data: Zero-argument supplier of extra form fields, called per attempt
        on_progress: Callback(item, item_progress, overall_progress)
        on_file_complete: Callback(item, succeeded, result_or_error)
        on_all_complete: Callback(summary)
        on_queue_update: Callback(items)
        transport: HTTP session settings
    """
    upload_url: str = DEFAULT_UPLOAD_URL
    file_field_name: str = DEFAULT_FILE_FIELD
    allowed_extensions: Tuple[str, ...] = DEFAULT_EXTENSIONS
    allowed_mime_types: Tuple[str, ...] = DEFAULT_MIME_TYPES
    csrf_token: str = ''
    concurrent_uploads: int = DEFAULT_CONCURRENT_UPLOADS
    extra_data: Optional[ExtraDataSupplier] = None
    on_progress: Optional[Callable] = None
    on_file_complete: Optional[Callable] = None
    on_all_complete: Optional[Callable] = None
    on_queue_update: Optional[Callable] = None
    transport: TransportConfig = field(default_factory=TransportConfig)

    def __post_init__(self):
        """Normalize sets and clamp the concurrency limit."""
        object.__setattr__(
            self, 'allowed_extensions',
            tuple(_normalize_extension(e) for e in self.allowed_extensions)
        )
        object.__setattr__(
            self, 'allowed_mime_types',
            tuple(m.strip().lower() for m in self.allowed_mime_types)
        )
        object.__setattr__(
            self, 'concurrent_uploads', clamp_concurrency(self.concurrent_uploads)
        )

    # External option name -> field name
    _OPTION_NAMES = {
        'uploadUrl': 'upload_url',
        'fileFieldName': 'file_field_name',
        'allowedExtensions': 'allowed_extensions',
        'allowedMimeTypes': 'allowed_mime_types',
        'antiForgeryToken': 'csrf_token',
        'csrfToken': 'csrf_token',
        'concurrentUploads': 'concurrent_uploads',
        'extraDataCallback': 'extra_data',
        'onProgress': 'on_progress',
        'onFileComplete': 'on_file_complete',
        'onAllComplete': 'on_all_complete',
        'onQueueUpdate': 'on_queue_update',
    }

    @classmethod
    def from_options(cls, options: Dict[str, Any], **kwargs) -> 'QueueConfig':
        """
        Create configuration from an options mapping.

        Accepts both the camelCase option names of the upload endpoint's
        web client and the snake_case field names. Unknown keys raise
        TypeError.
        """
        values: Dict[str, Any] = {}
        for key, value in options.items():
            name = cls._OPTION_NAMES.get(key, key)
            if name in ('allowed_extensions', 'allowed_mime_types'):
                value = tuple(value)
            values[name] = value
        values.update(kwargs)
        return cls(**values)

