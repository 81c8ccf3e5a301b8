"""Directory responses: redirect to index.html or render a listing.

A directory holding an index.html is answered with a redirect instead of the
file content, so relative links inside the page resolve against the
directory.
"""

from html import escape
from urllib.parse import quote

from ipfs_http_response.core.types import (
    BodyStream,
    ContentPath,
    Directory,
    DirectoryEntry,
    GatewayResponse,
)

INDEX_FILE = "index.html"
LISTING_CONTENT_TYPE = "text/html; charset=utf-8"

_SIZE_UNITS = ("B", "KiB", "MiB", "GiB", "TiB")


def respond(directory: Directory, requested_path: ContentPath) -> GatewayResponse:
    """Build the response for a resolved directory.

    Args:
        directory: Resolved directory node
        requested_path: Path the directory was resolved from

    Returns:
        302 to <path>/index.html when the directory has one, otherwise
        200 with a generated HTML listing
    """
    if directory.get(INDEX_FILE) is not None:
        return GatewayResponse.create(
            302,
            {
                "Content-Type": LISTING_CONTENT_TYPE,
                "Location": str(requested_path.child(INDEX_FILE)),
            },
        )

    body = render_listing(directory, requested_path).encode("utf-8")
    return GatewayResponse.create(
        200,
        {"Content-Type": LISTING_CONTENT_TYPE, "Content-Length": str(len(body))},
        BodyStream.from_bytes(body),
    )


def render_listing(directory: Directory, requested_path: ContentPath) -> str:
    """Render a minimal HTML document linking every entry, in backend order."""
    base = str(requested_path)
    title = escape(base)

    lines = [
        "<!DOCTYPE html>",
        "<html>",
        f"<head><meta charset=\"utf-8\"><title>{title}</title></head>",
        "<body>",
        f"<h1>Index of {title}</h1>",
        "<ul>",
    ]
    if requested_path.segments:
        parent = base.rsplit("/", 1)[0]
        lines.append(f'<li><a href="{escape(parent)}">..</a></li>')
    lines.extend(_render_entry(base, entry) for entry in directory.entries)
    lines.extend(["</ul>", "</body>", "</html>"])
    return "\n".join(lines) + "\n"


def _render_entry(base: str, entry: DirectoryEntry) -> str:
    href = escape(f"{base}/{quote(entry.name, safe='')}")
    label = escape(entry.name) + ("/" if entry.is_dir else "")
    size = ""
    if entry.size is not None and not entry.is_dir:
        size = f" <small>{format_size(entry.size)}</small>"
    return f'<li><a href="{href}">{label}</a>{size}</li>'


def format_size(size: int) -> str:
    """Format a byte count for display (e.g., 1536 -> "1.5 KiB")."""
    if size < 1024:
        return f"{size} B"
    value = float(size)
    unit = _SIZE_UNITS[0]
    for unit in _SIZE_UNITS[1:]:
        value /= 1024
        if value < 1024:
            break
    return f"{value:.1f} {unit}"
