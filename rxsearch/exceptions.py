"""
rxsearch 的异常类型。

每个异常带 type（错误大类，如 not_found）、code（具体错误码，如 MEDICATION_NOT_FOUND）、
message、可选 detail 和 http_status，exception_handler 直接把它们写进响应。

搜索核心（rxsearch.search）不抛这些异常：空查询、无匹配、未知 id 都是正常结果。
抛出的地方只有 view / intake 边界、catalog 加载和远程建议服务。
"""


class BaseAppException(Exception):
    """Root of every rxsearch error carried to an HTTP response."""

    type = 'error'
    code = 'UNKNOWN_ERROR'
    http_status = 500

    def __init__(self, message, code=None, detail=None, http_status=None):
        self.message = message
        if code is not None:
            self.code = code
        if http_status is not None:
            self.http_status = http_status
        self.detail = detail
        super().__init__(message)


class ValidationError(BaseAppException):
    """请求体 / query 参数不合法，400。"""

    type = 'validation_error'
    code = 'VALIDATION_ERROR'
    http_status = 400


class NotFoundError(BaseAppException):
    """按 id 查找 catalog 记录失败，404。核心层返回 None，由 view 转成这个异常。"""

    type = 'not_found'
    code = 'NOT_FOUND'
    http_status = 404


class CatalogLoadError(BaseAppException):
    """
    Catalog 数据集加载或校验失败。

    只在进程启动（AppConfig.ready）或 reload 时抛出，属于致命错误：
    fail fast，不允许每个请求单独失败。
    """

    type = 'catalog_error'
    code = 'CATALOG_LOAD_FAILED'
    http_status = 500


class UpstreamUnavailableError(BaseAppException):
    """
    远程建议服务（LLM）不可用或返回无法解析的内容。

    view 层捕获后降级到本地 catalog 搜索，并在响应里标记 fallback: true。
    """

    type = 'upstream_error'
    code = 'UPSTREAM_UNAVAILABLE'
    http_status = 503
