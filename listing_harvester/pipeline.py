import asyncio
import os
import sys
import time

from loguru import logger

from .browser import BrowserSession
from .config import Config
from .exceptions import SetupFailure, SinkFailure
from .orchestrator import HarvestOrchestrator
from .session_store import SessionStore
from .sink import export_failures, export_records, export_stats, output_path
from .sites import build_source


def setup_logger(config):
    """日志写入 logs/listing_harvester.log"""
    os.makedirs(config['logs_dir'], exist_ok=True)
    logger.add(
        os.path.join(config['logs_dir'], "listing_harvester.log"),
        level=config['log_level'],
        rotation=config['log_rotation'],
        retention=config['log_retention'],
    )


class HarvestPipeline:
    """按顺序采集所有列表来源，每个来源导出一个 xlsx"""

    def __init__(self, config=None, session_factory=None):
        self.config = Config.get_config_dict()
        if config:
            self.config.update(config)

        self.sources = [build_source(site, url) for site, url in self.config['listing_sources']]
        self.session_store = SessionStore(self.config['cookies_path'])
        self.session_factory = session_factory or self.create_session
        self.results = {}

    def create_session(self):
        return BrowserSession(
            headless=self.config['headless'],
            user_agent=self.config['user_agent'],
            accept_language=self.config['accept_language'],
            navigation_timeout=self.config['navigation_timeout'],
            ready_timeout=self.config['ready_timeout'],
        )

    def export(self, result):
        export_dir = self.config['export_dir']

        xlsx_path = output_path(export_dir, result.source_url)
        export_records(result.records, xlsx_path, self.config['export_sheet_name'])

        if result.failures:
            export_failures(
                result.failures,
                output_path(export_dir, result.source_url, '_failed.csv'),
                self.config['export_encoding'],
            )
        export_stats(result, output_path(export_dir, result.source_url, '_stats.json'))
        return xlsx_path

    async def harvest_source(self, session, source):
        """采集并导出单个来源，成功返回 True"""
        orchestrator = HarvestOrchestrator(
            session,
            source,
            max_attempts=self.config['max_attempts'],
            retry_delay=self.config['retry_delay'],
            page_delay=self.config['page_delay'],
        )

        try:
            result = await orchestrator.run()
        except SetupFailure as e:
            logger.error(f"来源采集失败，跳过: {e.source_url} - {e.cause}")
            return False

        self.results[source.url] = result

        try:
            self.export(result)
        except SinkFailure as e:
            logger.error(f"导出失败（内存中已有 {result.succeeded} 条记录）: {e.path} - {e.cause}")
            return False

        return True

    async def run(self):
        start_time = time.time()

        logger.info("🚀" * 30)
        logger.info("Listing Harvester 启动")
        logger.info("🚀" * 30)

        try:
            session = await self.session_factory().start()
        except Exception as e:
            logger.error(f"浏览器启动失败: {e}")
            return False

        ok = True
        try:
            try:
                await session.add_cookies(self.session_store.load())
            except Exception as e:
                logger.warning(f"cookies加载失败，已忽略: {e}")

            for source in self.sources:
                if not await self.harvest_source(session, source):
                    ok = False
        finally:
            # 无论是否失败都保存 cookies
            try:
                self.session_store.save(await session.cookies())
            except Exception as e:
                logger.error(f"cookies保存失败: {e}")
            await session.close()

        elapsed_time = time.time() - start_time
        if ok:
            logger.success(f"🎉 全部来源采集完成！总耗时: {elapsed_time:.2f} 秒")
        else:
            logger.error(f"采集结束，部分来源失败，总耗时: {elapsed_time:.2f} 秒")
        return ok

    def run_pipeline(self):
        return asyncio.run(self.run())


def main():
    config = Config.get_config_dict()
    setup_logger(config)

    errors = Config.validate()
    if errors:
        logger.error("配置错误：")
        for error in errors:
            logger.error(error)
        return 1

    Config.print_config()

    try:
        ok = HarvestPipeline(config).run_pipeline()
    except KeyboardInterrupt:
        logger.error("❌ 用户中断")
        return 1

    return 0 if ok else 1


if __name__ == '__main__':
    sys.exit(main())
