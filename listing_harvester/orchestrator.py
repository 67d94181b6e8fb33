import asyncio
import time
from enum import Enum

from loguru import logger

from .exceptions import NavigationError, PageFailure, RetryError, SetupFailure
from .frontier import UrlFrontier
from .items import ExtractionFailure, HarvestResult
from .retry import with_retries


class HarvestState(Enum):
    INIT = 'init'
    PAGINATING = 'paginating'
    FRONTIERING = 'frontiering'
    EXTRACTING = 'extracting'
    DONE = 'done'


class HarvestOrchestrator:
    """
    单个列表来源的采集流程：分页 -> 去重 -> 逐条解析详情页

    单页、单条失败只记录日志，不影响其它页面和房源；
    只有无法打开列表首页（SetupFailure）会抛给调用方。
    """

    def __init__(self, session, source, max_attempts=3, retry_delay=2.0, page_delay=0.0):
        self.session = session
        self.source = source
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.page_delay = page_delay
        self.state = HarvestState.INIT

    async def run(self):
        start_time = time.time()
        result = HarvestResult(source_url=self.source.url)
        frontier = UrlFrontier()

        logger.info("=" * 60)
        logger.info(f"开始采集 [{self.source.site}] {self.source.url}")
        logger.info("=" * 60)

        try:
            listing_page = await self.session.new_page()
        except Exception as e:
            raise SetupFailure(self.source.url, e) from e

        try:
            self.state = HarvestState.PAGINATING
            await self.collect_urls(listing_page, frontier, result)
        finally:
            await listing_page.close()

        self.state = HarvestState.FRONTIERING
        item_urls = frontier.drain()
        result.urls_rejected = frontier.rejected
        logger.info(f"唯一房源URL总数: {len(item_urls)}（过滤 {frontier.rejected} 条）")

        self.state = HarvestState.EXTRACTING
        await self.extract_all(item_urls, result)

        self.state = HarvestState.DONE
        elapsed_time = time.time() - start_time
        logger.success(
            f"采集完成: {self.source.url} | 尝试: {result.attempted}, 成功: {result.succeeded}, "
            f"失败: {result.failed}, 耗时: {elapsed_time:.2f} 秒"
        )
        return result

    async def collect_urls(self, listing_page, frontier, result):
        paginator = self.source.paginator
        total_pages = await paginator.page_count(listing_page, self.source.url)
        result.page_count = total_pages
        logger.info(f"总页数: {total_pages}")

        # 按 1..总页数 逐页采集，分页控件没有列出的中间页也会访问
        for page_index in range(1, total_pages + 1):
            logger.info(f"正在采集第 {page_index}/{total_pages} 页: {self.source.url}")
            try:
                urls = await paginator.item_urls(listing_page, self.source.url, page_index)
            except PageFailure as e:
                result.pages_failed += 1
                logger.error(f"列表页失败，按0条处理: {e.page_url} - {e.cause}")
                urls = []
            else:
                if not urls:
                    result.empty_pages += 1
                    logger.warning(f"⚠️  第 {page_index} 页没有房源链接")

            result.urls_discovered += len(urls)
            new_urls = sum(1 for url in urls if frontier.add(url))
            logger.info(f"第 {page_index} 页链接 {len(urls)} 条，新增 {new_urls} 条")

            if self.page_delay and page_index < total_pages:
                await asyncio.sleep(self.page_delay)

    async def extract_one(self, url):
        """带重试的单条解析，每次尝试都打开新页面"""
        extractor = self.source.extractor

        async def attempt():
            page = await self.session.new_page()
            try:
                return await extractor.extract(page, url)
            finally:
                await page.close()

        return await with_retries(self.max_attempts, self.retry_delay, attempt, label=url)

    async def extract_all(self, item_urls, result):
        total = len(item_urls)
        if not total:
            logger.info("没有需要处理的房源")
            return

        for index, url in enumerate(item_urls, 1):
            result.attempted += 1
            try:
                record = await self.extract_one(url)
            except RetryError as e:
                stage = 'navigate' if isinstance(e.last_error, NavigationError) else 'extract'
                result.failures.append(
                    ExtractionFailure(url=url, stage=stage, error=str(e.last_error), attempts=e.attempts)
                )
                logger.error(f"[{index}/{total}] ❌ 失败: {url} | 阶段: {stage} | 原因: {e.last_error}")
            else:
                result.records.append(record)
                logger.success(f"[{index}/{total}] ✅ 成功: {url}")

            if index % 10 == 0:
                logger.info(f"进度: {index}/{total} | 成功: {result.succeeded} | 失败: {result.failed}")
