"""Playwright 浏览器封装，只暴露采集需要的几个操作"""

from typing import List, Optional

from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from .exceptions import NavigationError, NavigationTimeout

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
]


class PlaywrightPage:
    """单个页面，每次详情页尝试都用新的页面"""

    def __init__(self, page, navigation_timeout=60000, ready_timeout=15000):
        self._page = page
        self.navigation_timeout = navigation_timeout
        self.ready_timeout = ready_timeout

    async def goto(self, url, wait_for=None):
        """打开页面并等待就绪元素出现，超时抛 NavigationTimeout"""
        try:
            await self._page.goto(url, wait_until='networkidle', timeout=self.navigation_timeout)
            if wait_for:
                await self._page.wait_for_selector(wait_for, state='attached', timeout=self.ready_timeout)
        except PlaywrightTimeoutError as e:
            raise NavigationTimeout(url, str(e)) from e
        except PlaywrightError as e:
            raise NavigationError(url, str(e)) from e

    async def text(self, selector) -> Optional[str]:
        element = await self._page.query_selector(selector)
        if element is None:
            return None
        return (await element.inner_text()).strip()

    async def texts(self, selector) -> List[str]:
        elements = await self._page.query_selector_all(selector)
        return [(await element.inner_text()).strip() for element in elements]

    async def attr(self, selector, name) -> Optional[str]:
        element = await self._page.query_selector(selector)
        if element is None:
            return None
        return await element.get_attribute(name)

    async def attrs(self, selector, name) -> List[str]:
        elements = await self._page.query_selector_all(selector)
        values = []
        for element in elements:
            value = await element.get_attribute(name)
            if value is not None:
                values.append(value)
        return values

    async def links(self, selector) -> List[str]:
        """返回绝对地址（浏览器已解析的 href 属性）"""
        return await self._page.eval_on_selector_all(
            selector, "anchors => anchors.map(a => a.href).filter(Boolean)"
        )

    async def rows(self, row_selector, key_selector, value_selectors):
        """
        扫描键值对行

        value_selectors 按顺序尝试，取第一个命中的元素。
        返回 [(key, value)]，缺失的一侧为 None。
        """
        pairs = []
        for row in await self._page.query_selector_all(row_selector):
            key_element = await row.query_selector(key_selector)
            value_element = None
            for value_selector in value_selectors:
                value_element = await row.query_selector(value_selector)
                if value_element is not None:
                    break

            key = (await key_element.inner_text()).strip() if key_element else None
            value = (await value_element.inner_text()).strip() if value_element else None
            pairs.append((key, value))
        return pairs

    async def structured_block(self, selector) -> Optional[str]:
        """读取内嵌数据块（script 标签）的原始文本"""
        element = await self._page.query_selector(selector)
        if element is None:
            return None
        return await element.text_content()

    async def close(self):
        try:
            await self._page.close()
        except PlaywrightError as e:
            logger.debug(f"关闭页面失败: {e}")


class BrowserSession:
    """一个浏览器 + 一个上下文，所有页面共享 cookies"""

    def __init__(self, headless=True, user_agent=None, accept_language=None,
                 navigation_timeout=60000, ready_timeout=15000):
        self.headless = headless
        self.user_agent = user_agent
        self.accept_language = accept_language
        self.navigation_timeout = navigation_timeout
        self.ready_timeout = ready_timeout

        self._playwright = None
        self._browser = None
        self._context = None

    async def start(self):
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(headless=self.headless, args=LAUNCH_ARGS)

        context_options = {}
        if self.user_agent:
            context_options['user_agent'] = self.user_agent
        if self.accept_language:
            context_options['extra_http_headers'] = {"Accept-Language": self.accept_language}
        self._context = await self._browser.new_context(**context_options)

        logger.info(f"浏览器启动成功 (headless={self.headless})")
        return self

    async def new_page(self):
        if self._context is None:
            raise RuntimeError("浏览器未启动")
        page = await self._context.new_page()
        return PlaywrightPage(page, self.navigation_timeout, self.ready_timeout)

    async def cookies(self):
        if self._context is None:
            return []
        return await self._context.cookies()

    async def add_cookies(self, cookies):
        if cookies:
            await self._context.add_cookies(cookies)

    async def close(self):
        if self._context is not None:
            await self._context.close()
            self._context = None
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
        logger.info("浏览器已关闭")

    async def __aenter__(self):
        return await self.start()

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
