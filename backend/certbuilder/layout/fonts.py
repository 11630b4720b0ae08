"""
字体解析与字宽测量

职责：
1. CSS字体族 -> PDF字体名（基础14字体或已注册TTF）
2. 常规/粗体分别查表（粗体字宽与常规字宽不同）
3. 按绘制时完全相同的字体/字号/字重测量字宽

依赖：
- reportlab: pdfmetrics 字宽表与TTF注册
"""

from __future__ import annotations

import logging
from pathlib import Path

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont

from ..config import RuntimeConfig, get_config
from ..interfaces import ConfigurationError
from ..models import TextStyle
from .units import pt_to_mm

logger = logging.getLogger(__name__)

_BOLD_VARIANTS = {
    "Helvetica": "Helvetica-Bold",
    "Times-Roman": "Times-Bold",
    "Courier": "Courier-Bold",
}

FALLBACK_FONT = "Helvetica"


class FontResolver:
    """字体解析器"""

    def __init__(self, config: RuntimeConfig | None = None):
        self.config = config or get_config()
        self.aliases = {k.lower(): v for k, v in self.config.typography.font_aliases.items()}
        self._registered: dict[str, str] = {}
        self._register_font_files()

    def resolve(self, family: str, bold: bool = False) -> str:
        """
        解析PDF字体名

        Args:
            family: CSS字体族（可为逗号分隔的候选列表）
            bold: 是否粗体

        Returns:
            可直接用于绘制与测量的字体名
        """
        for candidate in (c.strip().strip("'\"") for c in family.split(",")):
            if not candidate:
                continue
            base = self._registered.get(candidate.lower()) or self.aliases.get(candidate.lower())
            if base:
                return self._weight(base, bold)

        logger.warning(f"未知字体族，使用{FALLBACK_FONT}: {family}")
        return self._weight(FALLBACK_FONT, bold)

    def font_for(self, style: TextStyle) -> str:
        return self.resolve(style.font_family, style.bold)

    def text_width(self, text: str, style: TextStyle) -> float:
        """字宽(mm)，使用与绘制相同的字体"""
        font_name = self.font_for(style)
        return pt_to_mm(pdfmetrics.stringWidth(text, font_name, style.font_size))

    def _weight(self, base: str, bold: bool) -> str:
        if not bold:
            return base
        if base in _BOLD_VARIANTS:
            return _BOLD_VARIANTS[base]
        bold_name = f"{base}-Bold"
        if bold_name in pdfmetrics.getRegisteredFontNames():
            return bold_name
        return base

    def _register_font_files(self) -> None:
        """注册配置中的TTF字体（键为字体族或 族-Bold）"""
        for name, path in self.config.typography.font_files.items():
            font_path = Path(path)
            if not font_path.exists():
                raise ConfigurationError(f"字体文件不存在: {font_path}")
            if name not in pdfmetrics.getRegisteredFontNames():
                pdfmetrics.registerFont(TTFont(name, str(font_path)))
            if not name.endswith("-Bold"):
                self._registered[name.lower()] = name
