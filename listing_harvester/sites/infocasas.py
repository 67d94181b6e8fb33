"""InfoCasas (infocasas.com.bo)"""

from ..extractor import Extractor
from ..paginator import ListingPaginator, max_page_number

PAGINATION_SELECTOR = 'ul.search-results-pagination li a.ant-pagination-item-link'
CARD_SELECTOR = 'a.lc-cardCover'


class InfoCasasPaginator(ListingPaginator):
    """分页链接形如 /alquiler/pagina5"""

    def page_url(self, source_url, page_index):
        return f"{source_url.rstrip('/')}/pagina{page_index}"

    async def read_page_count(self, page):
        hrefs = await page.attrs(PAGINATION_SELECTOR, 'href')
        return max_page_number(hrefs, r'pagina(\d+)')

    async def read_item_urls(self, page):
        return await page.links(CARD_SELECTOR)


class InfoCasasExtractor(Extractor):
    site = 'infocasas'

    ready_selector = '.technical-sheet, script[type="application/ld+json"]'
    structured_selector = 'script[type="application/ld+json"]'
    sale_marker = 'Venta'

    row_selector = '.technical-sheet .ant-row'
    key_selector = '.ant-space-item span.ant-typography:not(.ant-typography-secondary)'
    value_selectors = ('strong', 'span:not(.ant-typography-secondary)')
    property_type_label = 'Tipo de Propiedad'

    description_selector = '.ant-typography.property-description'
    address_selector = '.property-location-tag p'
    price_selector = '.ant-typography.price strong'
    operation_selector = '.ant-typography.ant-typography-secondary.operation_type'
    # 卡片上的简要信息（卧室、浴室、面积...），第三项是面积
    summary_selector = 'span.ant-typography.ant-typography-ellipsis.ant-typography-ellipsis-single-line'

    def map_structured(self, structured):
        obj = structured.get('object') or {}
        if not isinstance(obj, dict):
            return {}

        geo = obj.get('geo') or {}
        return {
            'name': obj.get('name'),
            'description': obj.get('description'),
            'latitude': geo.get('latitude'),
            'longitude': geo.get('longitude'),
        }

    async def scrape(self, page):
        address_parts = [part for part in await page.texts(self.address_selector) if part]
        summary = await page.texts(self.summary_selector)

        return {
            'name': await page.text(self.name_selector),
            'description': await page.text(self.description_selector),
            'address': ', '.join(address_parts),
            'price': await page.text(self.price_selector),
            'area': summary[2] if len(summary) >= 3 else '',
            'features': summary,
        }

    async def transaction_marker(self, page, url, structured):
        return await page.text(self.operation_selector)
