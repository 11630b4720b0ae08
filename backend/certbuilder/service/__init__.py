"""
服务模块 - 请求编排与交付

子模块：
- certificate_service: 请求校验与生成编排
- delivery: 文件名/下载方式/归档
- providers: 课程数据与媒体文件的本地实现
"""

from .certificate_service import CertificateService
from .delivery import CertificateArchive, make_payload, sanitize_filename, suggest_filename
from .providers import InMemoryCourseDataProvider, LocalMediaResolver

__all__ = [
    "CertificateService",
    "CertificateArchive",
    "make_payload",
    "sanitize_filename",
    "suggest_filename",
    "InMemoryCourseDataProvider",
    "LocalMediaResolver",
]
