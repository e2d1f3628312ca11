"""Export service — renders the full grouped price list and tiles it into pages.

The table is rasterised once as a single tall image (Pillow). For PDF export
the image is scaled so its width fills the page and every page shows a
fixed-height window sliding down it (ReportLab). The last page may end with
blank space below the image.

Features:
- Page tiling geometry independent of any rendering library
- Full-height render of every filtered row, not just what is on screen
- PNG export (single image) and PDF export (tiled pages)
"""

import asyncio
import math
import os
import re
from dataclasses import dataclass
from datetime import datetime
from fractions import Fraction
from io import BytesIO
from pathlib import Path
from typing import List, Optional, Sequence

import arabic_reshaper
import structlog
from bidi.algorithm import get_display
from PIL import Image, ImageDraw, ImageFont
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from pricelist.application.services.price_calculator import format_cell
from pricelist.config import Settings, get_settings
from pricelist.core.exceptions import ExportError
from pricelist.domain.schemas.view import CategoryHeaderRow, ColumnDescriptor, ViewRow

logger = structlog.get_logger(__name__)

# Layout in unscaled pixels
PADDING = 16
TITLE_HEIGHT = 80
HEADER_HEIGHT = 40
CATEGORY_HEIGHT = 34
PRODUCT_HEIGHT = 30
FONT_SIZE = 14

HEADER_FILL = (24, 24, 27)
CATEGORY_FILL = (244, 244, 245)
GRID_COLOR = (228, 228, 231)
TEXT_COLOR = (39, 39, 42)
PRICE_COLOR = (4, 120, 87)
HIDDEN_COLOR = (161, 161, 170)


@dataclass(frozen=True)
class PageTile:
    index: int
    offset_y: float  # image top relative to the page top, physical units
    source_top: float  # window into the source image, pixels
    source_bottom: float


def page_height_px(image_width: float, page_width: float, page_height: float) -> float:
    """Source pixels covered by one page once the image width fills the page."""
    return page_height * image_width / page_width


def scaled_image_height(image_width: float, image_height: float, page_width: float) -> float:
    return image_height * page_width / image_width


def tile_pages(image_width: float, image_height: float, page_width: float, page_height: float) -> List[PageTile]:
    """Slice a tall image into fixed-size page windows, top to bottom."""
    if min(image_width, image_height, page_width, page_height) <= 0:
        raise ExportError(
            "Image and page dimensions must be positive",
            {
                "image": [image_width, image_height],
                "page": [page_width, page_height],
            },
        )

    # Exact arithmetic so an image of exactly N pages never gets a blank N+1th
    total = math.ceil(
        Fraction(image_height) * Fraction(page_width) / (Fraction(page_height) * Fraction(image_width))
    )
    window = page_height_px(image_width, page_width, page_height)
    return [
        PageTile(
            index=i,
            offset_y=-(page_height * i),
            source_top=i * window,
            source_bottom=min((i + 1) * window, image_height),
        )
        for i in range(total)
    ]


_ARABIC = re.compile("[\u0600-\u06ff\u0750-\u077f\u08a0-\u08ff\ufb50-\ufdff\ufe70-\ufeff]")
_INVISIBLE = re.compile("[\u200b-\u200f\u202a-\u202e\u2066-\u2069\ufeff]")


def shape_text(text: str) -> str:
    """Display-ready text: Arabic is joined into presentation forms and put in visual order."""
    text = " ".join(_INVISIBLE.sub("", text or "").split())
    if not _ARABIC.search(text):
        return text
    return get_display(arabic_reshaper.reshape(text))


def _load_font(font_path: Optional[str], size: int):
    if font_path:
        return ImageFont.truetype(font_path, size)
    return ImageFont.load_default(size=size)


def _column_widths(columns: Sequence[ColumnDescriptor], content_width: int) -> List[int]:
    total = sum(c.min_width for c in columns) or 1
    widths = [content_width * c.min_width // total for c in columns]
    if widths:
        widths[0] += content_width - sum(widths)
    return widths


def render_table_image(
    rows: Sequence[ViewRow],
    columns: Sequence[ColumnDescriptor],
    rate: float,
    scale: int = 2,
    width_px: int = 800,
    title: str = "",
    font_path: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Image.Image:
    """Draw the title block, header row and every view row; columns run right to left."""
    columns = [c for c in columns if c.kind != "actions"]
    now = now or datetime.now()
    s = scale

    body_height = sum(CATEGORY_HEIGHT if isinstance(r, CategoryHeaderRow) else PRODUCT_HEIGHT for r in rows)
    height = PADDING * 2 + TITLE_HEIGHT + HEADER_HEIGHT + body_height
    image = Image.new("RGB", (width_px * s, height * s), "white")
    draw = ImageDraw.Draw(image)

    font = _load_font(font_path, FONT_SIZE * s)
    title_font = _load_font(font_path, 22 * s)
    small_font = _load_font(font_path, 12 * s)

    left, right = PADDING * s, (width_px - PADDING) * s
    widths = [w * s for w in _column_widths(columns, width_px - PADDING * 2)]

    def cell_text(x0: int, x1: int, y0: int, y1: int, text: str, fnt, fill, align: str = "center") -> None:
        text = shape_text(text)
        text_width = draw.textlength(text, font=fnt)
        if align == "right":
            x = x1 - text_width - 8 * s
        elif align == "left":
            x = x0 + 8 * s
        else:
            x = x0 + (x1 - x0 - text_width) / 2
        draw.text((x, (y0 + y1) / 2), text, font=fnt, fill=fill, anchor="lm")

    # Title block
    y = PADDING * s
    cell_text(left, right, y, y + 44 * s, title, title_font, TEXT_COLOR)
    cell_text(left, right, y + 44 * s, y + TITLE_HEIGHT * s, now.strftime("%Y-%m-%d  %H:%M"), small_font, HIDDEN_COLOR)
    y += TITLE_HEIGHT * s

    # Header row
    draw.rectangle([left, y, right, y + HEADER_HEIGHT * s], fill=HEADER_FILL)
    x1 = right
    for column, width in zip(columns, widths):
        cell_text(x1 - width, x1, y, y + HEADER_HEIGHT * s, column.header, font, "white", column.align)
        x1 -= width
    y += HEADER_HEIGHT * s

    for row in rows:
        if isinstance(row, CategoryHeaderRow):
            row_height = CATEGORY_HEIGHT * s
            draw.rectangle([left, y, right, y + row_height], fill=CATEGORY_FILL)
            cell_text(left, right, y, y + row_height, row.name, font, TEXT_COLOR, "right")
        else:
            row_height = PRODUCT_HEIGHT * s
            product = row.product
            x1 = right
            for column, width in zip(columns, widths):
                if product.is_hidden:
                    fill = HIDDEN_COLOR
                elif column.id == "syp_final":
                    fill = PRICE_COLOR
                else:
                    fill = TEXT_COLOR
                cell_text(x1 - width, x1, y, y + row_height, format_cell(column.id, product, rate), font, fill, column.align)
                x1 -= width
        draw.line([left, y + row_height - 1, right, y + row_height - 1], fill=GRID_COLOR, width=max(1, s // 2))
        y += row_height

    return image


def write_png(image: Image.Image, target) -> None:
    image.save(target, format="PNG")


def write_pdf(image: Image.Image, target, page_width_mm: float, page_height_mm: float, quality: int = 95) -> int:
    """Write the image as tiled PDF pages; returns the page count."""
    page_width, page_height = page_width_mm * mm, page_height_mm * mm
    tiles = tile_pages(image.width, image.height, page_width, page_height)
    image_height = scaled_image_height(image.width, image.height, page_width)

    jpeg = BytesIO()
    image.convert("RGB").save(jpeg, format="JPEG", quality=quality)
    jpeg.seek(0)
    reader = ImageReader(jpeg)

    pdf = canvas.Canvas(target, pagesize=(page_width, page_height), pageCompression=1)
    for tile in tiles:
        # ReportLab measures y from the bottom edge of the page
        y = page_height - tile.offset_y - image_height
        pdf.drawImage(reader, 0, y, width=page_width, height=image_height)
        pdf.showPage()
    pdf.save()
    return len(tiles)


class ExportService:
    """Renders view rows to PNG/PDF files under the export directory."""

    def __init__(self, settings: Optional[Settings] = None, export_dir: Optional[str | Path] = None):
        self.settings = settings or get_settings()
        self.export_dir = Path(export_dir or self.settings.EXPORT_DIR)

    async def render(self, rows: Sequence[ViewRow], columns: Sequence[ColumnDescriptor], rate: float, scale: int) -> Image.Image:
        await asyncio.sleep(0)  # cooperate
        return render_table_image(
            rows,
            columns,
            rate,
            scale=scale,
            width_px=self.settings.EXPORT_WIDTH_PX,
            title=self.settings.SHOP_NAME,
            font_path=self.settings.EXPORT_FONT_PATH,
        )

    def _target(self, suffix: str) -> Path:
        os.makedirs(self.export_dir, exist_ok=True)
        return self.export_dir / f"price-list-{datetime.now().date().isoformat()}.{suffix}"

    async def export_png(self, rows: Sequence[ViewRow], columns: Sequence[ColumnDescriptor], rate: float) -> Path:
        try:
            image = await self.render(rows, columns, rate, self.settings.PNG_EXPORT_SCALE)
            target = self._target("png")
            write_png(image, target)
        except ExportError:
            raise
        except Exception as e:
            raise ExportError("Could not export the price list image", {"error": str(e)}) from e
        logger.info("PNG exported", path=str(target), rows=len(rows))
        return target

    async def export_pdf(self, rows: Sequence[ViewRow], columns: Sequence[ColumnDescriptor], rate: float) -> Path:
        try:
            image = await self.render(rows, columns, rate, self.settings.PDF_EXPORT_SCALE)
            target = self._target("pdf")
            pages = write_pdf(
                image,
                str(target),
                self.settings.PDF_PAGE_WIDTH_MM,
                self.settings.PDF_PAGE_HEIGHT_MM,
                self.settings.PDF_JPEG_QUALITY,
            )
        except ExportError:
            raise
        except Exception as e:
            raise ExportError("Could not export the price list PDF", {"error": str(e)}) from e
        logger.info("PDF exported", path=str(target), rows=len(rows), pages=pages)
        return target
