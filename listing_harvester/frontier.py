import re

from loguru import logger

# 主机名是 IP 地址的链接（CDN/测试环境残留），直接丢弃
IP_URL_PATTERN = re.compile(r'^https?://\d+\.\d+\.\d+\.\d+')


class UrlFrontier:
    """详情页链接去重，保持首次出现的顺序"""

    def __init__(self):
        self._urls = {}
        self.rejected = 0

    def add(self, url):
        """加入链接，已存在或被过滤时返回 False"""
        if not url:
            self.rejected += 1
            logger.warning("跳过空URL")
            return False

        if IP_URL_PATTERN.match(url):
            self.rejected += 1
            logger.warning(f"跳过IP地址URL: {url}")
            return False

        if url in self._urls:
            logger.debug(f"重复URL: {url}")
            return False

        self._urls[url] = None
        return True

    def size(self):
        return len(self._urls)

    def __len__(self):
        return self.size()

    def __contains__(self, url):
        return url in self._urls

    def drain(self):
        """取出全部链接并清空"""
        urls = list(self._urls)
        self._urls.clear()
        return urls
