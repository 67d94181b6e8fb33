import json
import os

from loguru import logger


class SessionStore:
    """cookies 持久化：启动时读取，结束时写回"""

    def __init__(self, path):
        self.path = path

    def load(self):
        if not os.path.exists(self.path):
            logger.info(f"未找到cookies文件: {self.path}")
            return []

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                cookies = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"读取cookies失败: {self.path} - {e}")
            return []

        if not isinstance(cookies, list):
            logger.warning(f"cookies格式错误，已忽略: {self.path}")
            return []

        logger.info(f"已加载 {len(cookies)} 条cookies")
        return cookies

    def save(self, cookies):
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump(list(cookies), f, ensure_ascii=False, indent=2)
        logger.info(f"cookies已保存: {self.path}")
