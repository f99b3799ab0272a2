"""Common literal values used across refdocs.

These constants keep reserved page ids, well-known filenames and media types
centralized so formatters, the reconciler and tests import the same values
without drifting. Intended for internal use within the refdocs package.

Examples
--------
>>> from refdocs import _constants
>>> _constants.MANIFEST_NAMES["html"]
'.build'
>>> _constants.INDEX_ID
'index'
"""

GENERATOR_NAME = "refdocs"
GENERATOR_VERSION = "0.1.0"

INDEX_ID = "index"
NOT_FOUND_ID = "404"
API_REFERENCE_ID = "api-reference"
API_REFERENCE_TITLE = "API Reference"

SENTINEL_NAME = ".refdocs"
MANIFEST_NAMES = {"html": ".build", "epub": ".build-epub"}

DIST_DIR = "dist"
ASSETS_DIR = "assets"
ALLOWED_LOGO_SUFFIXES = (".jpg", ".png")

EPUB_MIMETYPE = "application/epub+zip"
EPUB_MEDIA_TYPES = {
    ".xhtml": "application/xhtml+xml",
    ".css": "text/css",
    ".js": "application/javascript",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".svg": "image/svg+xml",
    ".woff2": "font/woff2",
    ".ttf": "font/ttf",
}
EPUB_COMPRESSED_SUFFIXES = (
    ".css",
    ".xhtml",
    ".html",
    ".ncx",
    ".js",
    ".opf",
    ".jpg",
    ".png",
    ".xml",
)
