"""
课程模型 - 协作方提供的课程数据与课程列表中的可绘制条目

两者都只在一次生成中存在，不持久化
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class CourseRecord(BaseModel):
    """课程数据（标题缺失时为空串，未完成时日期为空串）"""

    course_id: int
    title: str = ""
    completion_date: str = ""


class CourseEntry(BaseModel):
    """课程条目（高度在分页前计算完毕）"""

    course_id: int | None = None
    title: str = ""
    completion_date: str = ""
    instructor: str = ""

    # 绘制高度(mm)
    height: int = Field(0, ge=0)

    # 单行行高(mm)，绘制时逐行下移
    line_height: int = 0
    field_margin: int = 0
