import json
import os
import re
import time

import pandas as pd
from loguru import logger
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE

from .exceptions import SinkFailure
from .items import CANONICAL_FIELDS, detail_key

CANONICAL_HEADERS = {
    'url': 'URL',
    'name': 'Name',
    'description': 'Description',
    'address': 'Address',
    'price': 'Price',
    'area': 'Area',
    'property_type': 'Property Type',
    'transaction_type': 'Transaction Type',
    'latitude': 'Latitude',
    'longitude': 'Longitude',
    'features': 'Features',
}

LIST_DELIMITER = ' | '
PAIR_DELIMITER = '; '

FAILURE_COLUMNS = ['url', 'stage', 'error', 'attempts']


def flatten_value(value):
    """嵌套值转成单元格文本：字典 -> "k: v; k: v"，列表 -> "a | b" """
    if value is None:
        return ''
    if isinstance(value, dict):
        return PAIR_DELIMITER.join(
            f"{key}: {flatten_value(value[key])}" for key in sorted(value, key=str)
        )
    if isinstance(value, (set, frozenset)):
        return LIST_DELIMITER.join(sorted(flatten_value(item) for item in value))
    if isinstance(value, (list, tuple)):
        return LIST_DELIMITER.join(flatten_value(item) for item in value)
    if isinstance(value, str):
        # openpyxl 拒绝控制字符，整个工作簿会写入失败
        return ILLEGAL_CHARACTERS_RE.sub('', value)
    return value


def flatten_record(record):
    """Record -> 一行：固定字段在前，参数表按采集顺序追加"""
    row = {name: flatten_value(getattr(record, name)) for name in CANONICAL_FIELDS}
    row['features'] = flatten_value(record.features)

    taken = set(row) | set(record.details)
    for key, value in record.details.items():
        # 固定字段优先
        if key in row:
            key = detail_key(key, taken)
            taken.add(key)
        row[key] = flatten_value(value)
    return row


def build_columns(rows):
    """生成 (表头, 键) 列表：固定字段 + 其余键按首次出现顺序，表头不重复"""
    columns = [(CANONICAL_HEADERS[key], key) for key in (*CANONICAL_FIELDS, 'features')]
    seen = {key for _, key in columns}
    headers = {header for header, _ in columns}
    for row in rows:
        for key in row:
            if key in seen:
                continue
            seen.add(key)
            header = flatten_value(key)
            if header in headers:
                header = detail_key(header, headers)
                logger.warning(f"列名 {key} 与已有表头重复，改为 {header}")
            headers.add(header)
            columns.append((header, key))
    return columns


def output_path(export_dir, source_url, suffix='.xlsx'):
    """由列表页URL生成安全的文件名"""
    safe_url = re.sub(r'[^a-z0-9]', '_', source_url.lower())
    return os.path.join(export_dir, f"{safe_url}{suffix}")


def ensure_parent(path):
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)


class ExcelSink:
    """写入单个工作表的 xlsx 文件，已存在时直接覆盖"""

    def __init__(self, sheet_name='Properties'):
        self.sheet_name = sheet_name

    def write(self, rows, columns, path):
        try:
            ensure_parent(path)
            df = pd.DataFrame(list(rows), columns=[key for _, key in columns]).fillna('')
            df.columns = [header for header, _ in columns]
            df.to_excel(path, sheet_name=self.sheet_name, index=False)
        except Exception as e:
            raise SinkFailure(path, e) from e

        logger.success(f"数据导出成功: {path}, 共 {len(df)} 条记录")
        return path


def export_records(records, path, sheet_name='Properties'):
    rows = [flatten_record(record) for record in records]
    return ExcelSink(sheet_name).write(rows, build_columns(rows), path)


def export_failures(failures, path, encoding='utf-8-sig'):
    """失败的URL导出为CSV，方便手动重跑"""
    try:
        ensure_parent(path)
        df = pd.DataFrame(
            [[f.url, f.stage, f.error, f.attempts] for f in failures],
            columns=FAILURE_COLUMNS,
        )
        df.to_csv(path, index=False, encoding=encoding)
    except Exception as e:
        raise SinkFailure(path, e) from e

    logger.warning(f"失败记录已导出: {path}, 共 {len(failures)} 条")
    return path


def export_stats(result, path):
    stats = result.stats()
    stats['export_time'] = time.strftime("%Y%m%d_%H%M%S")

    try:
        ensure_parent(path)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(stats, f, ensure_ascii=False, indent=4)
    except OSError as e:
        raise SinkFailure(path, e) from e

    logger.success(f"完整记录: {result.succeeded}/{result.attempted} ({stats['completion_rate']})")
    return path
