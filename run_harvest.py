#!/usr/bin/env python3
"""
房源采集脚本
按 Config.LISTING_SOURCES 顺序采集所有列表页，每个来源导出一个 xlsx
"""

import sys

from listing_harvester.pipeline import main

if __name__ == '__main__':
    sys.exit(main())
