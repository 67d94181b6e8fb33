import json
from abc import ABC, abstractmethod

from loguru import logger

from .items import CANONICAL_FIELDS, PRICE_ON_REQUEST, RENT, SALE, Record, detail_key

# 按结构化数据 -> 页面元素 -> 参数表的顺序取值的字段
DATA_FIELDS = ('address', 'price', 'area', 'property_type', 'latitude', 'longitude')


def clean(value):
    if value is None:
        return ''
    return str(value).strip()


def first_filled(*candidates):
    """返回第一个非空值，全为空时返回空字符串"""
    for candidate in candidates:
        value = clean(candidate)
        if value:
            return value
    return ''


def merge_details(raw_fields):
    """参数表并入记录，和固定字段重名的标签加 detail_ 前缀"""
    details = {}
    taken = set(raw_fields)
    for key, value in raw_fields.items():
        if key in CANONICAL_FIELDS:
            renamed = detail_key(key, taken)
            logger.warning(f"参数表标签与固定字段重名，保留为 {renamed}")
            taken.add(renamed)
            key = renamed
        details[key] = value
    return details


class Extractor(ABC):
    """
    详情页解析器，每个站点一个实现

    extract() 的流程固定：
    1. 打开页面并等待就绪元素
    2. 读取内嵌结构化数据（优先使用）
    3. 读取参数表（标签 -> 值）
    4. 根据关键字判断出售/出租，没有关键字时默认出租
    5. 价格为空时使用占位值
    6. 合并为 Record，固定字段优先
    7. 名称/描述：页面元素 -> 结构化数据 -> meta 标签
    """

    site = 'base'

    ready_selector = None
    structured_selector = None
    sale_marker = None

    # 参数表
    row_selector = None
    key_selector = None
    value_selectors = ()
    property_type_label = None

    # 名称/描述
    name_selector = 'h1'
    description_selector = None
    name_meta_selectors = ('meta[property="og:title"]',)
    description_meta_selectors = ('meta[name="description"]', 'meta[property="og:description"]')

    @abstractmethod
    async def scrape(self, page):
        """从页面元素读取候选值，返回 {字段: 值}"""

    @abstractmethod
    async def transaction_marker(self, page, url, structured):
        """返回用于判断出售/出租的文本"""

    def map_structured(self, structured):
        """把结构化数据映射为 {字段: 值}"""
        return {}

    async def read_structured(self, page):
        if not self.structured_selector:
            return {}

        raw = await page.structured_block(self.structured_selector)
        if not raw:
            return {}

        try:
            data = json.loads(raw)
        except ValueError as e:
            logger.warning(f"结构化数据解析失败: {e}")
            return {}

        return data if isinstance(data, dict) else {}

    async def read_raw_fields(self, page, structured):
        if not self.row_selector:
            return {}

        fields = {}
        for key, value in await page.rows(self.row_selector, self.key_selector, self.value_selectors):
            key = clean(key)
            value = clean(value)
            if key and value:
                fields[key] = value
        return fields

    def transaction_type(self, marker_text):
        if self.sale_marker and marker_text and self.sale_marker in marker_text:
            return SALE
        return RENT

    async def resolve_text(self, page, primary, structured, meta_selectors):
        """页面元素 -> 结构化数据 -> meta 标签，前面有值时后面不再读取"""
        value = first_filled(primary, structured)
        if value:
            return value

        for selector in meta_selectors:
            value = clean(await page.attr(selector, 'content'))
            if value:
                return value
        return ''

    async def extract(self, page, url):
        await page.goto(url, wait_for=self.ready_selector)

        structured = await self.read_structured(page)
        raw_fields = await self.read_raw_fields(page, structured)
        from_structured = self.map_structured(structured)
        scraped = await self.scrape(page)

        derived = {}
        if self.property_type_label and self.property_type_label in raw_fields:
            derived['property_type'] = raw_fields[self.property_type_label]

        values = {
            name: first_filled(from_structured.get(name), scraped.get(name), derived.get(name))
            for name in DATA_FIELDS
        }
        if not values['price']:
            values['price'] = PRICE_ON_REQUEST

        name = await self.resolve_text(
            page, scraped.get('name'), from_structured.get('name'), self.name_meta_selectors
        )
        description = await self.resolve_text(
            page, scraped.get('description'), from_structured.get('description'),
            self.description_meta_selectors
        )

        marker = await self.transaction_marker(page, url, structured)
        features = tuple(
            clean(feature)
            for feature in (from_structured.get('features') or scraped.get('features') or ())
            if clean(feature)
        )

        record = Record(
            url=url,
            name=name,
            description=description,
            transaction_type=self.transaction_type(marker),
            details=merge_details(raw_fields),
            features=features,
            **values,
        )
        logger.info(f"成功解析房源: {url}")
        return record
