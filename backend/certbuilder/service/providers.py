"""
协作方实现 - 课程数据与媒体文件

生产环境由站点数据层提供；这里的实现用于命令行与测试：
- InMemoryCourseDataProvider: 字典驱动的用户/课程数据
- LocalMediaResolver: 附件ID -> 本地图片文件（Pillow读取像素尺寸）
"""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path
from typing import Any

from PIL import Image, UnidentifiedImageError

from ..interfaces import DataError, ICourseDataProvider, IMediaResolver, RenderError
from ..models import ImageAsset


class InMemoryCourseDataProvider(ICourseDataProvider):
    """内存课程数据"""

    def __init__(
        self,
        users: dict[int, str] | None = None,
        courses: dict[int, str] | None = None,
        completions: dict[tuple[int, int], Any] | None = None,
        custom_fields: dict[int, dict[str, Any]] | None = None,
        date_format: str = "%B %d, %Y",
    ):
        self.users = users or {}
        self.courses = courses or {}
        self.completions = completions or {}
        self.custom_fields = custom_fields or {}
        self.date_format = date_format

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InMemoryCourseDataProvider:
        """
        从JSON结构构建

        格式：
            {"users": {"1": "Jane"}, "courses": {"10": "ABA 101"},
             "completions": {"1:10": 1700000000}, "custom_fields": {"1": {"credits": "3"}}}
        """
        completions = {}
        for key, value in (data.get("completions") or {}).items():
            user_id, course_id = (int(p) for p in str(key).split(":", 1))
            completions[(user_id, course_id)] = value

        return cls(
            users={int(k): v for k, v in (data.get("users") or {}).items()},
            courses={int(k): v for k, v in (data.get("courses") or {}).items()},
            completions=completions,
            custom_fields={int(k): v for k, v in (data.get("custom_fields") or {}).items()},
            date_format=data.get("date_format", "%B %d, %Y"),
        )

    def get_user_display_name(self, user_id: int) -> str:
        if user_id not in self.users:
            raise DataError(f"用户不存在: {user_id}")
        return self.users[user_id]

    def get_course_title(self, course_id: int) -> str | None:
        return self.courses.get(course_id)

    def get_course_completion_date(self, user_id: int, course_id: int) -> str:
        """完成时间戳/日期格式化，未完成返回空串"""
        value = self.completions.get((user_id, course_id))
        if not value:
            return ""
        if isinstance(value, (int, float)):
            value = datetime.fromtimestamp(value)
        if isinstance(value, (date, datetime)):
            return value.strftime(self.date_format)
        return str(value)

    def get_custom_fields(self, user_id: int, course_ids: list[int]) -> dict[str, str]:
        return {k: str(v) for k, v in self.custom_fields.get(user_id, {}).items()}


class LocalMediaResolver(IMediaResolver):
    """本地媒体解析（附件ID或路径）"""

    def __init__(self, attachments: dict[Any, str | Path] | None = None, base_dir: Path | None = None):
        self.attachments = {str(k): Path(v) for k, v in (attachments or {}).items()}
        self.base_dir = base_dir

    def resolve(self, image_ref: Any) -> ImageAsset | None:
        if image_ref in (None, "", 0):
            return None

        path = self.attachments.get(str(image_ref))
        if path is None:
            if isinstance(image_ref, int):
                return None
            path = Path(image_ref)
        if self.base_dir and not path.is_absolute():
            path = self.base_dir / path
        if not path.exists():
            return None

        try:
            with Image.open(path) as img:
                width, height = img.size
        except (OSError, UnidentifiedImageError) as e:
            raise RenderError(f"图片无法识别: {path}: {e}") from e

        return ImageAsset(ref=image_ref, source=path, width=width, height=height)
