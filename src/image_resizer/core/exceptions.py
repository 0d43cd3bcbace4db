"""项目内使用的自定义异常定义。"""


class ImageResizerError(Exception):
    """基础异常类型。"""


class SetupError(ImageResizerError):
    """启动阶段的致命错误：输入路径、输出路径或数值参数不合法。"""


class PromptError(ImageResizerError):
    """标准输入/输出不可用，无法完成覆盖确认。"""


class IdentifyError(ImageResizerError):
    """无法读取或识别图片格式。"""


class ConvertError(ImageResizerError):
    """缩放或编码失败。"""


class OutputDirectoryError(ImageResizerError):
    """无法创建输出目录。"""
