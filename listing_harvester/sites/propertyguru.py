"""PropertyGuru (propertyguru.com.sg)，数据都在 __NEXT_DATA__ 里"""

import json

from loguru import logger

from ..extractor import Extractor
from ..paginator import ListingPaginator

NEXT_DATA_SELECTOR = 'script#__NEXT_DATA__'


def page_data(data_json):
    """取 props.pageProps.pageData.data"""
    return data_json.get('props', {}).get('pageProps', {}).get('pageData', {}).get('data', {})


async def read_next_data(page):
    raw = await page.structured_block(NEXT_DATA_SELECTOR)
    if not raw:
        logger.error("__NEXT_DATA__ 获取失败")
        return {}
    try:
        return json.loads(raw)
    except ValueError:
        logger.error("__NEXT_DATA__ JSON 解析失败")
        return {}


class PropertyGuruPaginator(ListingPaginator):
    """分页形如 /property-for-rent/2"""

    ready_selector = NEXT_DATA_SELECTOR
    base_url = 'https://www.propertyguru.com.sg/'

    def page_url(self, source_url, page_index):
        return f"{source_url.rstrip('/')}/{page_index}"

    async def read_page_count(self, page):
        pagination = page_data(await read_next_data(page)).get('pagination', {})
        return pagination.get('totalPages')

    async def read_item_urls(self, page):
        listings_data = page_data(await read_next_data(page)).get('listingsData', [])
        logger.info(f"列表页数据数量：{len(listings_data)}")

        urls = []
        for item in listings_data:
            url = item.get('listingData', {}).get('url', '')
            if not url:
                logger.warning("房源缺少URL，已跳过")
                continue
            if not url.startswith('http'):
                url = self.base_url + url.lstrip('/')
            urls.append(url)
        return urls


class PropertyGuruExtractor(Extractor):
    site = 'propertyguru'

    ready_selector = NEXT_DATA_SELECTOR
    structured_selector = NEXT_DATA_SELECTOR
    # 详情页地址形如 /listing/for-sale-xxx-12345
    sale_marker = 'for-sale'

    def map_structured(self, structured):
        data = page_data(structured)
        listing_data = data.get('listingData', {})
        if not listing_data:
            return {}

        area = ''
        floor_area = listing_data.get('floorArea')
        if floor_area:
            area = f"{floor_area} sqft"

        property_type = listing_data.get('propertyType')
        if not property_type:
            for badge in listing_data.get('badges', []):
                if badge.get('name') == 'unit_type':
                    property_type = badge.get('text')

        location = listing_data.get('location') or {}

        features = []
        for feature_item in listing_data.get('listingFeatures', []):
            # 有的是嵌套列表
            if isinstance(feature_item, list):
                features.extend(sub.get('text', '') for sub in feature_item if isinstance(sub, dict))
            elif isinstance(feature_item, dict):
                features.append(feature_item.get('text', ''))

        return {
            'name': listing_data.get('localizedTitle'),
            'description': listing_data.get('description'),
            'address': listing_data.get('fullAddress'),
            'price': (listing_data.get('price') or {}).get('pretty'),
            'area': area,
            'property_type': property_type,
            'latitude': location.get('latitude'),
            'longitude': location.get('longitude'),
            'features': features,
        }

    async def read_raw_fields(self, page, structured):
        """徽章、附加信息和中介信息作为参数表"""
        data = page_data(structured)
        listing_data = data.get('listingData', {})

        fields = {}
        for badge in listing_data.get('badges', []):
            name = (badge.get('name') or '').strip()
            text = (badge.get('text') or '').strip()
            if name and text:
                fields[name] = text

        for key in ('bedrooms', 'bathrooms', 'tenure', 'builtYear'):
            value = listing_data.get(key)
            if value is None:
                value = listing_data.get('additionalData', {}).get(key)
            if value is not None and str(value).strip():
                fields[key] = str(value).strip()

        agent = data.get('contactAgentData', {}).get('contactAgentCard', {}).get(
            'agentInfoProps', {}).get('agent', {})
        if agent.get('name'):
            fields['agent_name'] = agent['name']
        if agent.get('mobile'):
            fields['agent_phone'] = agent['mobile']
        if agent.get('ceaNumber'):
            fields['agent_license'] = agent['ceaNumber']

        return fields

    async def scrape(self, page):
        return {
            'name': await page.text(self.name_selector),
        }

    async def transaction_marker(self, page, url, structured):
        return url
