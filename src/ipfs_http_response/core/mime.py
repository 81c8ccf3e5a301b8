"""File extension to Content-Type mapping."""

from ipfs_http_response.core.types import MediaType

DEFAULT_MIME_TYPE = "application/octet-stream"
DEFAULT_CHARSET = "utf-8"

MIME_TYPES: dict[str, str] = {
    # Text
    "html": "text/html",
    "htm": "text/html",
    "css": "text/css",
    "csv": "text/csv",
    "txt": "text/plain",
    "text": "text/plain",
    "log": "text/plain",
    "md": "text/markdown",
    "markdown": "text/markdown",
    "xml": "application/xml",
    "js": "application/javascript",
    "mjs": "application/javascript",
    "json": "application/json",
    "map": "application/json",
    "webmanifest": "application/manifest+json",
    # Images
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "svg": "image/svg+xml",
    "webp": "image/webp",
    "avif": "image/avif",
    "ico": "image/x-icon",
    "bmp": "image/bmp",
    "tif": "image/tiff",
    "tiff": "image/tiff",
    # Fonts
    "woff": "font/woff",
    "woff2": "font/woff2",
    "ttf": "font/ttf",
    "otf": "font/otf",
    # Audio / video
    "mp3": "audio/mpeg",
    "ogg": "audio/ogg",
    "wav": "audio/wav",
    "flac": "audio/flac",
    "mp4": "video/mp4",
    "webm": "video/webm",
    "ogv": "video/ogg",
    "mov": "video/quicktime",
    # Documents and archives
    "pdf": "application/pdf",
    "zip": "application/zip",
    "gz": "application/gzip",
    "tar": "application/x-tar",
    "wasm": "application/wasm",
}

# Non-text/* types that are still text and get a charset
_TEXT_APPLICATION_TYPES = frozenset(
    {"application/javascript", "application/json", "application/xml"}
)


def classify(file_name: str) -> MediaType:
    """Map a file name to its media type by extension.

    The extension is the text after the last dot, compared case-insensitively.
    Unknown or missing extensions map to application/octet-stream.
    """
    _, dot, extension = file_name.rpartition(".")
    mime_type = MIME_TYPES.get(extension.lower(), DEFAULT_MIME_TYPE) if dot else DEFAULT_MIME_TYPE

    if mime_type.startswith("text/") or mime_type in _TEXT_APPLICATION_TYPES:
        return MediaType(mime_type, charset=DEFAULT_CHARSET)
    return MediaType(mime_type)
