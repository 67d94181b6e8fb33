"""采集过程中的异常类型"""


class HarvestError(Exception):
    """所有采集异常的基类"""


class NavigationError(HarvestError):
    """页面打开失败"""

    def __init__(self, url, reason):
        self.url = url
        self.reason = reason
        super().__init__(f"打开页面失败 {url}: {reason}")


class NavigationTimeout(NavigationError):
    """页面加载或就绪等待超时（可重试）"""


class SetupFailure(HarvestError):
    """无法获取浏览器页面，或无法加载列表首页，该来源的采集终止"""

    def __init__(self, source_url, cause):
        self.source_url = source_url
        self.cause = cause
        super().__init__(f"来源初始化失败 {source_url}: {cause}")


class PageFailure(HarvestError):
    """单个列表页加载失败，按 0 条链接处理"""

    def __init__(self, page_url, page_index, cause):
        self.page_url = page_url
        self.page_index = page_index
        self.cause = cause
        super().__init__(f"列表页 {page_index} 加载失败 {page_url}: {cause}")


class SinkFailure(HarvestError):
    """导出文件写入失败"""

    def __init__(self, path, cause):
        self.path = path
        self.cause = cause
        super().__init__(f"导出失败 {path}: {cause}")


class RetryError(HarvestError):
    """重试次数用尽"""

    def __init__(self, attempts, last_error):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"重试 {attempts} 次后仍失败: {last_error}")
