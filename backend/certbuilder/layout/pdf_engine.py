"""
PDF导出引擎 - 文档模型序列化为PDF字节流

职责：
1. 按文档页尺寸创建画布，逐页绘制背景/文本/图片
2. 坐标从左上角mm转换为PDF左下角pt
3. PDF页数计算

依赖：
- reportlab: 画布绘制与字体度量
- pypdf: 页数计算

测试要点：
- test_write_pages: 页数与文档一致
- test_invariant_output: 相同输入输出相同字节
- test_bad_image_raises: 图片数据异常时报RenderError
"""

from __future__ import annotations

import io
from pathlib import Path

from pypdf import PdfReader
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas

from ..config import RuntimeConfig, get_config
from ..interfaces import IPDFWriter, RenderError
from ..models import Document, ImageAsset, Page, PlacedImage, PlacedText
from .fonts import FontResolver
from .renderer import ElementRenderer
from .units import mm_to_pt


class PDFExporter(IPDFWriter):
    """PDF导出器实现"""

    def __init__(
        self,
        config: RuntimeConfig | None = None,
        fonts: FontResolver | None = None,
    ):
        self.config = config or get_config()
        self.fonts = fonts or FontResolver(self.config)

    def write(self, document: Document) -> bytes:
        """序列化文档"""
        buffer = io.BytesIO()
        page_size = (mm_to_pt(document.width), mm_to_pt(document.height))

        try:
            pdf = canvas.Canvas(
                buffer,
                pagesize=page_size,
                invariant=1 if self.config.pdf.invariant else 0,
            )
            pdf.setTitle(self.config.pdf.title)
            if self.config.pdf.author:
                pdf.setAuthor(self.config.pdf.author)

            background = self._reader(document.background) if document.background else None
            for page in document.pages:
                if background is not None:
                    self._draw_background(pdf, background, document)
                self._draw_page(pdf, page, document.height)
                pdf.showPage()

            pdf.save()
        except RenderError:
            raise
        except Exception as e:
            raise RenderError(f"PDF写出失败: {e}") from e

        return buffer.getvalue()

    def count_pages(self, pdf_bytes: bytes) -> int:
        """计算PDF页数"""
        try:
            return len(PdfReader(io.BytesIO(pdf_bytes)).pages)
        except Exception as e:
            raise RenderError(f"PDF解析失败: {e}") from e

    def _draw_background(self, pdf: canvas.Canvas, reader: ImageReader, document: Document) -> None:
        """背景contain缩放，水平居中、顶端对齐"""
        x, y, width, height = ElementRenderer.background_box(
            document.background, document.width, document.height
        )
        pdf.drawImage(
            reader,
            mm_to_pt(x),
            mm_to_pt(document.height - y - height),
            width=mm_to_pt(width),
            height=mm_to_pt(height),
            mask="auto",
        )

    def _draw_page(self, pdf: canvas.Canvas, page: Page, page_height: float) -> None:
        for element in page.elements:
            if isinstance(element, PlacedText):
                self._draw_text(pdf, element, page_height)
            elif isinstance(element, PlacedImage):
                self._draw_image(pdf, element, page_height)

    def _draw_text(self, pdf: canvas.Canvas, text: PlacedText, page_height: float) -> None:
        """y为文本框顶边，基线 = 顶边 + 字体上升高度"""
        font_name = self.fonts.font_for(text.style)
        size = text.style.font_size
        ascent = pdfmetrics.getAscent(font_name, size)
        pdf.setFont(font_name, size)
        pdf.drawString(
            mm_to_pt(text.x),
            mm_to_pt(page_height - text.y) - ascent,
            text.text,
        )

    def _draw_image(self, pdf: canvas.Canvas, image: PlacedImage, page_height: float) -> None:
        pdf.drawImage(
            self._reader(image.image),
            mm_to_pt(image.x),
            mm_to_pt(page_height - image.y - image.height),
            width=mm_to_pt(image.width),
            height=mm_to_pt(image.height),
            mask="auto",
        )

    @staticmethod
    def _reader(asset: ImageAsset) -> ImageReader:
        try:
            if isinstance(asset.source, bytes):
                return ImageReader(io.BytesIO(asset.source))
            path = Path(asset.source)
            if not path.exists():
                raise RenderError(f"图片文件不存在: {path}")
            return ImageReader(str(path))
        except RenderError:
            raise
        except Exception as e:
            raise RenderError(f"图片数据无效: {asset.ref}: {e}") from e
