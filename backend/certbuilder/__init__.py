"""
证书版面引擎 - 后端核心模块

模块结构：
- config/     运行期配置
- models/     数据模型定义
- layout/     版面引擎（单位换算/坐标存储/元素绘制/课程列表/分页/组装/PDF写出）
- service/    请求编排与交付（文件名/下载方式/归档）
- cli         命令行入口
"""

__version__ = "0.1.0"
