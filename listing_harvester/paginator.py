import re
from abc import ABC, abstractmethod

from loguru import logger

from .exceptions import NavigationError, PageFailure, SetupFailure


def max_page_number(hrefs, pattern):
    """从分页链接中取最大页码，没有可解析的页码时返回 None"""
    regex = re.compile(pattern)
    numbers = []
    for href in hrefs:
        match = regex.search(href or '')
        if match:
            numbers.append(int(match.group(1)))
    return max(numbers) if numbers else None


class ListingPaginator(ABC):
    """列表页分页策略，每个站点一个实现"""

    # 列表页就绪元素；列表页可能为空，默认不等待
    ready_selector = None

    @abstractmethod
    def page_url(self, source_url, page_index):
        """第 N 页的地址"""

    @abstractmethod
    async def read_page_count(self, page):
        """从已打开的列表页读取总页数，读不到返回 None"""

    @abstractmethod
    async def read_item_urls(self, page):
        """从已打开的列表页读取所有详情页链接"""

    async def page_count(self, page, source_url):
        """打开列表首页读取总页数，至少为 1"""
        try:
            await page.goto(source_url, wait_for=self.ready_selector)
        except NavigationError as e:
            raise SetupFailure(source_url, e) from e

        try:
            total = int(await self.read_page_count(page) or 0)
        except Exception as e:
            logger.warning(f"分页信息解析失败，按单页处理: {source_url} - {e}")
            total = None

        if not total or total < 1:
            logger.info(f"未找到分页控件，按单页处理: {source_url}")
            return 1
        return total

    async def item_urls(self, page, source_url, page_index):
        """打开第 N 页并返回详情页链接，失败时抛 PageFailure"""
        page_url = self.page_url(source_url, page_index)
        try:
            await page.goto(page_url, wait_for=self.ready_selector)
            urls = await self.read_item_urls(page)
        except Exception as e:
            raise PageFailure(page_url, page_index, e) from e
        return list(urls)
