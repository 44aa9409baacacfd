"""项目内使用的自定义异常定义。"""


class PhotoShrinkError(Exception):
    """基础异常类型。"""


class InvalidConfigurationError(PhotoShrinkError):
    """配置不合法时抛出。"""


class DiscoveryError(PhotoShrinkError):
    """输入目录不存在或无法读取。"""


class CodecError(PhotoShrinkError):
    """单个文件解码、缩放或编码失败。"""


class ImageDecodeError(CodecError):
    """图片无法解码。"""


class ImageWriteError(CodecError):
    """输出写入失败。"""


class OutputDirectoryError(PhotoShrinkError):
    """输出目录无法创建。"""
