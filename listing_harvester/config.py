"""
房源采集配置文件

使用说明：
1. 修改 LISTING_SOURCES 添加要采集的列表页
2. 在代码中使用：from listing_harvester.config import Config
"""

from loguru import logger


class Config:
    """配置类 - 统一管理所有配置参数"""

    # ==================== 采集来源 ====================
    # (站点, 列表页URL)，按顺序逐个采集
    LISTING_SOURCES = [
        ('infocasas', 'https://www.infocasas.com.bo/alquiler'),
    ]

    # ==================== 浏览器配置 ====================
    HEADLESS = True
    USER_AGENT = (
        'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
        '(KHTML, like Gecko) Chrome/90.0.4430.93 Safari/537.36'
    )
    ACCEPT_LANGUAGE = 'en-US,en;q=0.9'

    # ==================== 超时与重试 ====================
    NAVIGATION_TIMEOUT = 60000  # 页面加载超时（毫秒）
    READY_TIMEOUT = 15000  # 等待关键元素出现的超时（毫秒）
    MAX_ATTEMPTS = 3  # 详情页最大尝试次数
    RETRY_DELAY = 2.0  # 重试间隔（秒）
    PAGE_DELAY = 1.0  # 列表页之间的间隔（秒）

    # ==================== 数据存储配置 ====================
    DATA_DIR = 'data'
    EXPORT_DIR = 'data/export'
    COOKIES_PATH = 'data/cookies.json'
    LOGS_DIR = 'logs'

    # ==================== 日志配置 ====================
    LOG_LEVEL = 'INFO'  # 日志级别：DEBUG, INFO, WARNING, ERROR
    LOG_ROTATION = '500 MB'  # 日志文件大小限制
    LOG_RETENTION = '30 days'  # 日志保留时间

    # ==================== 导出配置 ====================
    EXPORT_SHEET_NAME = 'Properties'
    EXPORT_ENCODING = 'utf-8-sig'  # CSV导出编码（utf-8-sig支持Excel）

    @classmethod
    def validate(cls):
        """验证配置是否完整"""
        errors = []

        if not cls.LISTING_SOURCES:
            errors.append("❌ LISTING_SOURCES 未设置")
        if cls.MAX_ATTEMPTS < 1:
            errors.append("❌ MAX_ATTEMPTS 必须 >= 1")
        if cls.RETRY_DELAY < 0 or cls.PAGE_DELAY < 0:
            errors.append("❌ RETRY_DELAY / PAGE_DELAY 不能为负数")
        if cls.NAVIGATION_TIMEOUT <= 0 or cls.READY_TIMEOUT <= 0:
            errors.append("❌ 超时时间必须 > 0")

        return errors

    @classmethod
    def get_config_dict(cls):
        """获取配置字典（用于传递给Pipeline）"""
        return {
            'listing_sources': list(cls.LISTING_SOURCES),
            'headless': cls.HEADLESS,
            'user_agent': cls.USER_AGENT,
            'accept_language': cls.ACCEPT_LANGUAGE,
            'navigation_timeout': cls.NAVIGATION_TIMEOUT,
            'ready_timeout': cls.READY_TIMEOUT,
            'max_attempts': cls.MAX_ATTEMPTS,
            'retry_delay': cls.RETRY_DELAY,
            'page_delay': cls.PAGE_DELAY,
            'data_dir': cls.DATA_DIR,
            'export_dir': cls.EXPORT_DIR,
            'cookies_path': cls.COOKIES_PATH,
            'logs_dir': cls.LOGS_DIR,
            'log_level': cls.LOG_LEVEL,
            'log_rotation': cls.LOG_ROTATION,
            'log_retention': cls.LOG_RETENTION,
            'export_sheet_name': cls.EXPORT_SHEET_NAME,
            'export_encoding': cls.EXPORT_ENCODING,
        }

    @classmethod
    def print_config(cls):
        """打印当前配置"""
        logger.info("=" * 60)
        logger.info("当前配置")
        logger.info("=" * 60)
        for site, url in cls.LISTING_SOURCES:
            logger.info(f"来源: [{site}] {url}")
        logger.info(f"无头模式: {cls.HEADLESS}")
        logger.info(f"页面超时: {cls.NAVIGATION_TIMEOUT}ms, 就绪超时: {cls.READY_TIMEOUT}ms")
        logger.info(f"最大尝试次数: {cls.MAX_ATTEMPTS}, 重试间隔: {cls.RETRY_DELAY}秒")
        logger.info(f"导出目录: {cls.EXPORT_DIR}")
        logger.info("=" * 60)
