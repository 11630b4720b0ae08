"""
请求/结果模型 - 生成入参、失败哨兵与交付载荷
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator


class BuildRequest(BaseModel):
    """生成请求（由外部接口层传入）"""

    user_id: int = Field(..., gt=0)
    course_ids: list[int] = Field(default_factory=list)
    background_id: Any = None
    stream_mode: bool = False

    @field_validator("course_ids", mode="before")
    @classmethod
    def _split_ids(cls, v: Any) -> Any:
        """兼容逗号分隔字符串"""
        if isinstance(v, str):
            return [int(p) for p in v.split(",") if p.strip()]
        return v


class BuildResult(BaseModel):
    """生成结果：成功含PDF字节流，失败为哨兵（content为空，附原因）"""

    ok: bool
    content: bytes | None = None
    page_count: int = 0
    reason: str | None = None

    @classmethod
    def success(cls, content: bytes, page_count: int) -> BuildResult:
        return cls(ok=True, content=content, page_count=page_count)

    @classmethod
    def failure(cls, reason: str) -> BuildResult:
        return cls(ok=False, reason=reason)

    def __bool__(self) -> bool:
        return self.ok


class Disposition(str, Enum):
    """Content-Disposition 类型"""
    INLINE = "inline"
    ATTACHMENT = "attachment"


class DeliveryPayload(BaseModel):
    """交付载荷（交给下载/预览协作方）"""

    content: bytes
    filename: str
    disposition: Disposition
    content_type: str = "application/pdf"
    created_at: datetime = Field(default_factory=datetime.now)

    @property
    def size(self) -> int:
        return len(self.content)

    def headers(self) -> dict[str, str]:
        """HTTP响应头"""
        headers = {
            "Content-Type": self.content_type,
            "Content-Disposition": f'{self.disposition.value}; filename="{self.filename}"',
            "Content-Length": str(self.size),
            "Cache-Control": "private, no-transform, no-store, must-revalidate, max-age=0",
            "X-Content-Type-Options": "nosniff",
        }
        if self.disposition is Disposition.INLINE:
            headers["Accept-Ranges"] = "bytes"
        return headers
