"""
Document view to PDF rendering.

A view is rasterized with Pillow at an upscale factor on a white background,
then the bitmap is placed on a single reportlab page: scaled to fit, centered
horizontally and aligned to the top. The page carries no text layer.
"""

import io
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont
from reportlab.lib.pagesizes import A4, landscape, letter, portrait
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from ...core.config import PDFSettings, get_settings
from ...core.utils.blocking import run_blocking
from ...domain.errors import PDFGenerationError

logger = logging.getLogger(__name__)

PAGE_SIZES = {"a4": A4, "letter": letter}

BACKGROUND = (255, 255, 255)


@dataclass(frozen=True)
class TextStyle:
    size: int
    color: Tuple[int, int, int] = (0, 0, 0)
    space_after: int = 6
    align: str = "left"


STYLES: Dict[str, TextStyle] = {
    "title": TextStyle(size=24, space_after=4),
    "heading": TextStyle(size=18, space_after=6),
    "body": TextStyle(size=14, space_after=4),
    "muted": TextStyle(size=12, color=(90, 90, 90), space_after=4),
    "right": TextStyle(size=14, space_after=2, align="right"),
    "button": TextStyle(size=14, color=(255, 255, 255), space_after=8),
    "rule": TextStyle(size=1, space_after=12),
    "spacer": TextStyle(size=8, space_after=0),
}


@dataclass
class ViewElement:
    """One block of a document view."""

    text: str = ""
    style: str = "body"
    print_hidden: bool = False
    visible: bool = True


@dataclass
class RenderedView:
    """An ordered document view; ``width`` is in unscaled pixels."""

    elements: List[ViewElement] = field(default_factory=list)
    width: int = 768
    padding: int = 24

    def add(self, text: str = "", style: str = "body", print_hidden: bool = False) -> "RenderedView":
        self.elements.append(ViewElement(text=text, style=style, print_hidden=print_hidden))
        return self


def _font(size: int) -> ImageFont.ImageFont:
    return ImageFont.load_default(size=size)


def _wrap(text: str, font, max_width: float) -> List[str]:
    lines: List[str] = []
    for paragraph in text.split("\n"):
        current = ""
        for word in paragraph.split(" "):
            candidate = f"{current} {word}" if current else word
            if current and font.getlength(candidate) > max_width:
                lines.append(current)
                current = word
            else:
                current = candidate
        lines.append(current)
    return lines


class PDFRenderer:
    """Renders a ``RenderedView`` to a single image-only PDF page."""

    def __init__(self, settings: Optional[PDFSettings] = None):
        self.settings = settings or get_settings().pdf

    async def generate(self, view: RenderedView) -> bytes:
        return await run_blocking(self.render, view)

    def render(self, view: RenderedView) -> bytes:
        """
        Raises:
            PDFGenerationError: rasterizing or writing the page failed.
        """
        try:
            image = self.capture(view)
            return self._to_pdf(image)
        except PDFGenerationError:
            raise
        except Exception as e:
            logger.error(f"Error generating PDF: {e}", exc_info=True)
            raise PDFGenerationError(str(e)) from e

    def capture(self, view: RenderedView) -> Image.Image:
        """Rasterize with print-hidden elements hidden, restoring them afterwards."""
        hidden = [el for el in view.elements if el.print_hidden]
        original = [el.visible for el in hidden]
        for el in hidden:
            el.visible = False
        try:
            return self._rasterize(view)
        finally:
            for el, visible in zip(hidden, original):
                el.visible = visible

    def _rasterize(self, view: RenderedView) -> Image.Image:
        scale = self.settings.scale
        width = view.width * scale
        padding = view.padding * scale
        content_width = width - 2 * padding

        # layout pass: (element, style, font, lines, line height)
        blocks = []
        height = padding
        for element in view.elements:
            if not element.visible:
                continue
            style = STYLES.get(element.style, STYLES["body"])
            font = _font(style.size * scale)
            line_height = int(style.size * scale * 1.4)
            if element.style in ("rule", "spacer"):
                lines: List[str] = []
                block_height = line_height
            else:
                lines = _wrap(element.text, font, content_width)
                block_height = line_height * len(lines)
                if element.style == "button":
                    block_height += 12 * scale
            blocks.append((element, style, font, lines, line_height))
            height += block_height + style.space_after * scale
        height += padding

        image = Image.new("RGB", (width, max(height, 1)), BACKGROUND)
        draw = ImageDraw.Draw(image)
        y = padding
        for element, style, font, lines, line_height in blocks:
            if element.style == "rule":
                mid = y + line_height // 2
                draw.line([(padding, mid), (width - padding, mid)], fill=(200, 200, 200), width=scale)
                y += line_height
            elif element.style == "spacer":
                y += line_height
            elif element.style == "button":
                text_width = max(font.getlength(line) for line in lines)
                box = (padding, y, padding + text_width + 24 * scale, y + line_height * len(lines) + 12 * scale)
                draw.rectangle(box, fill=(37, 99, 235))
                for i, line in enumerate(lines):
                    draw.text((padding + 12 * scale, y + 6 * scale + i * line_height), line, font=font, fill=style.color)
                y = box[3]
            else:
                for line in lines:
                    x = padding
                    if style.align == "right":
                        x = width - padding - font.getlength(line)
                    draw.text((x, y), line, font=font, fill=style.color)
                    y += line_height
            y += style.space_after * scale
        return image

    def _to_pdf(self, image: Image.Image) -> bytes:
        page_size = PAGE_SIZES[self.settings.format]
        if self.settings.orientation == "landscape":
            page_size = landscape(page_size)
        else:
            page_size = portrait(page_size)
        page_width, page_height = page_size

        img_width, img_height = image.size
        ratio = min(page_width / img_width, page_height / img_height)
        draw_width = img_width * ratio
        draw_height = img_height * ratio
        x = (page_width - draw_width) / 2
        # reportlab's origin is bottom-left; align the image to the top edge
        y = page_height - draw_height

        png = io.BytesIO()
        image.save(png, format="PNG")
        png.seek(0)

        buffer = io.BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=page_size)
        pdf.drawImage(ImageReader(png), x, y, width=draw_width, height=draw_height)
        pdf.showPage()
        pdf.save()
        return buffer.getvalue()
