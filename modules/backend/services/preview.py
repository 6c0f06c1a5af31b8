"""
Preview Service.

Renders the first visible lines of a document as a 300x200 SVG thumbnail,
stores it under ``previews/<id>.svg`` and builds cache-busting URLs for it.

Rendering is pure (``extract_structured_text`` and ``render_preview_svg``);
``PreviewService`` adds the file handling around it.
"""

import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, NamedTuple
from xml.sax.saxutils import escape

from modules.backend.core.concurrency import run_blocking
from modules.backend.core.config import get_app_config
from modules.backend.core.exceptions import ApplicationError, NotFoundError, StorageError, ValidationError
from modules.backend.core.storage import StoragePaths, write_file_atomic
from modules.backend.repositories.document import DocumentContentRepository
from modules.backend.services.base import BaseService

CANVAS_WIDTH = 300
CANVAS_HEIGHT = 200
PADDING = 20
LINE_HEIGHT = 16
FONT_SIZE = 12
# Average glyph width as a fraction of the font size.
GLYPH_WIDTH_RATIO = 0.6
LINE_SPACING_UNITS = 5
PIXELS_PER_SPACING_UNIT = 3
ELLIPSIS = "..."

MAX_CHARS_PER_LINE = int((CANVAS_WIDTH - PADDING * 2) // (FONT_SIZE * GLYPH_WIDTH_RATIO))

FONT_FAMILY = "-apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif"

PREVIEW_MEDIA_TYPES = {
    ".svg": "image/svg+xml",
    ".png": "image/png",
}

_PARAGRAPH_BREAK = re.compile(r"\r{2,}")
_LINE_BREAK = re.compile(r"[\r\n]")


class PreviewLine(NamedTuple):
    text: str
    space_above: int


@dataclass(frozen=True)
class PreviewFile:
    """A stored preview ready to be served."""

    path: Path
    media_type: str
    etag: str
    content: bytes


def extract_structured_text(content: Any) -> list[PreviewLine]:
    """
    Split a document's text stream into display lines.

    The editor separates paragraphs with runs of ``\\r``; a run of two or
    more marks a line break in the preview. Every line after the first
    carries a fixed spacing hint.
    """
    if not isinstance(content, dict):
        return []
    body = content.get("body")
    if not isinstance(body, dict):
        return []
    stream = body.get("dataStream")
    if not isinstance(stream, str) or not stream:
        return []

    texts = [_LINE_BREAK.sub("", chunk).strip() for chunk in _PARAGRAPH_BREAK.split(stream)]
    texts = [text for text in texts if text]
    return [
        PreviewLine(text, LINE_SPACING_UNITS if index > 0 else 0)
        for index, text in enumerate(texts)
    ]


def wrap_line(text: str, max_chars: int = MAX_CHARS_PER_LINE) -> list[str]:
    """
    Greedy word wrap against a character budget.

    A word that alone exceeds the budget is cut and ends in ``...`` so no
    display line is wider than ``max_chars``.
    """
    display_lines: list[str] = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if len(candidate) <= max_chars:
            current = candidate
            continue
        if current:
            display_lines.append(current)
        if len(word) > max_chars:
            display_lines.append(word[: max_chars - len(ELLIPSIS)] + ELLIPSIS)
            current = ""
        else:
            current = word
    if current:
        display_lines.append(current)
    return display_lines


def _text_element(x: int, y: int, text: str) -> str:
    return (
        f'<text x="{x}" y="{y}" font-family="{FONT_FAMILY}" '
        f'font-size="{FONT_SIZE}" fill="#374151">{escape(text)}</text>'
    )


def render_preview_svg(lines: list[PreviewLine]) -> str:
    """Render display lines into the thumbnail markup."""
    header = f'<svg width="{CANVAS_WIDTH}" height="{CANVAS_HEIGHT}" xmlns="http://www.w3.org/2000/svg">'
    background = '<rect width="100%" height="100%" fill="#f8f9fa" stroke="#e5e7eb" stroke-width="1"/>'

    if not lines:
        placeholder = (
            '<text x="50%" y="50%" text-anchor="middle" dominant-baseline="central" '
            f'font-family="{FONT_FAMILY}" font-size="14" fill="#9ca3af" '
            'font-style="italic">Empty Document</text>'
        )
        return "\n".join([header, f"  {background}", f"  {placeholder}", "</svg>"])

    elements: list[str] = []
    y = PADDING
    overflowed = False
    for line in lines:
        y += line.space_above * PIXELS_PER_SPACING_UNIT
        for display_line in wrap_line(line.text):
            y += LINE_HEIGHT
            if y > CANVAS_HEIGHT - PADDING:
                overflowed = True
                break
            elements.append(_text_element(PADDING, y, display_line))
        if overflowed:
            break

    if overflowed and elements:
        elements[-1] = elements[-1].replace("</text>", f"{ELLIPSIS}</text>")

    body = [f"  {element}" for element in [background, *elements]]
    return "\n".join([header, *body, "</svg>"])


class PreviewService(BaseService):
    """
    Service for preview thumbnails.

    Only reads document content; never modifies documents.
    """

    def __init__(self, paths: StoragePaths) -> None:
        super().__init__(paths)
        self.content_repo = DocumentContentRepository(paths)
        previews = get_app_config().storage.previews
        self.url_prefix = previews.url_prefix.rstrip("/")
        self.placeholder_url = previews.placeholder_url

    def _url(self, document_id: str, token: int) -> str:
        return f"{self.url_prefix}/{document_id}.svg?t={token}"

    def _write_preview(self, document_id: str, markup: str) -> None:
        path = self.paths.preview_path(document_id)
        try:
            write_file_atomic(path, markup.encode("utf-8"))
        except OSError as e:
            raise StorageError(f"Failed to write preview {document_id}: {e}") from e

    async def generate_preview(self, document_id: str, content: Any) -> str:
        """
        Render and store the preview, overwriting any previous one.

        Returns:
            Preview URL with the current time as cache-busting token
        """
        markup = render_preview_svg(extract_structured_text(content))
        await run_blocking(self._write_preview, document_id, markup)
        self._log_debug("Preview generated", document_id=document_id)
        return self._url(document_id, time.time_ns() // 1_000_000)

    def _preview_mtime_ms(self, document_id: str) -> int | None:
        try:
            return self.paths.preview_path(document_id).stat().st_mtime_ns // 1_000_000
        except FileNotFoundError:
            return None

    async def get_preview_url(self, document_id: str) -> str:
        """
        URL of the stored preview, or the placeholder if none exists yet.

        The cache-busting token is the file's mtime, so repeated calls
        return the same URL until the preview is regenerated. Never
        triggers generation.
        """
        mtime_ms = await run_blocking(self._preview_mtime_ms, document_id)
        if mtime_ms is None:
            return self.placeholder_url
        return self._url(document_id, mtime_ms)

    async def get_preview_urls(self, document_ids: list[str]) -> dict[str, str]:
        """``get_preview_url`` for many documents in one pool call."""
        mtimes = await run_blocking(
            lambda: {document_id: self._preview_mtime_ms(document_id) for document_id in document_ids}
        )
        return {
            document_id: self.placeholder_url if mtime is None else self._url(document_id, mtime)
            for document_id, mtime in mtimes.items()
        }

    def _delete_previews(self, document_id: str) -> int:
        removed = 0
        for suffix in PREVIEW_MEDIA_TYPES:
            try:
                self.paths.preview_path(document_id, suffix).unlink()
                removed += 1
            except FileNotFoundError:
                continue
        return removed

    async def delete_previews(self, document_id: str) -> int:
        """Remove the SVG preview and any legacy PNG preview. Missing files are fine."""
        return await run_blocking(self._delete_previews, document_id)

    def _load_preview_file(self, filename: str) -> PreviewFile:
        path = self.paths.previews / filename
        try:
            stat = path.stat()
            content = path.read_bytes()
        except FileNotFoundError:
            raise NotFoundError("Preview not found")
        except OSError as e:
            raise StorageError(f"Failed to read preview {filename}: {e}") from e
        return PreviewFile(
            path=path,
            media_type=PREVIEW_MEDIA_TYPES[path.suffix.lower()],
            etag=f'"{stat.st_mtime_ns:x}-{stat.st_size:x}"',
            content=content,
        )

    async def get_preview_file(self, filename: str) -> PreviewFile:
        """
        Load a preview for serving.

        Raises:
            ValidationError: If the filename could escape the previews
                directory or is not ``.svg`` / ``.png``
            NotFoundError: If the file does not exist
        """
        if ".." in filename or "/" in filename or "\\" in filename:
            raise ValidationError("Invalid filename", details={"filename": filename})
        if Path(filename).suffix.lower() not in PREVIEW_MEDIA_TYPES:
            raise ValidationError("Invalid file type", details={"filename": filename})
        return await run_blocking(self._load_preview_file, filename)

    async def generate_missing(self) -> dict[str, int]:
        """
        Render previews for every document that has no SVG preview.

        Renders synchronously. A document that cannot be read or rendered
        is counted as an error and the batch continues.

        Returns:
            Stats dict with total, generated, skipped and errors
        """
        document_ids = await run_blocking(self.content_repo.store.ids)
        stats = {"total": len(document_ids), "generated": 0, "skipped": 0, "errors": 0}

        for document_id in document_ids:
            if await run_blocking(self.paths.preview_path(document_id).is_file):
                stats["skipped"] += 1
                continue
            try:
                document = await self.content_repo.get_by_id(document_id)
                await self.generate_preview(document_id, document.content)
            except ApplicationError as e:
                self._logger.error(
                    "Preview generation failed",
                    extra={"document_id": document_id, "error": e.message},
                )
                stats["errors"] += 1
                continue
            stats["generated"] += 1

        self._log_operation("Preview batch complete", **stats)
        return stats
