"""
测试用的假浏览器：页面内容用字典描述，不需要真实的 Playwright
"""

import json

import pytest

from listing_harvester.exceptions import NavigationError


class FakeSite:
    """
    pages: {url: 页面描述}
        页面描述的键：text / texts / attr / attrs / links / rows / blocks
    failures: {url: [异常, ...]}，每次打开该URL时依次抛出
    """

    def __init__(self, pages=None, failures=None):
        self.pages = pages or {}
        self.failures = failures or {}
        self.visits = []

    def visit_count(self, url):
        return self.visits.count(url)


class FakePage:
    def __init__(self, site):
        self.site = site
        self.current = None
        self.closed = False

    async def goto(self, url, wait_for=None):
        self.site.visits.append(url)
        pending = self.site.failures.get(url)
        if pending:
            raise pending.pop(0)
        if url not in self.site.pages:
            raise NavigationError(url, "404")
        self.current = self.site.pages[url]

    def _section(self, name):
        return (self.current or {}).get(name, {})

    async def text(self, selector):
        return self._section('text').get(selector)

    async def texts(self, selector):
        return list(self._section('texts').get(selector, []))

    async def attr(self, selector, name):
        return self._section('attr').get((selector, name))

    async def attrs(self, selector, name):
        return list(self._section('attrs').get((selector, name), []))

    async def links(self, selector):
        return list(self._section('links').get(selector, []))

    async def rows(self, row_selector, key_selector, value_selectors):
        return list(self._section('rows').get(row_selector, []))

    async def structured_block(self, selector):
        return self._section('blocks').get(selector)

    async def close(self):
        self.closed = True


class FakeSession:
    def __init__(self, site, cookies=None):
        self.site = site
        self.pages = []
        self.stored_cookies = list(cookies or [])
        self.started = False
        self.closed = False

    async def start(self):
        self.started = True
        return self

    async def new_page(self):
        page = FakePage(self.site)
        self.pages.append(page)
        return page

    async def cookies(self):
        return list(self.stored_cookies)

    async def add_cookies(self, cookies):
        self.stored_cookies.extend(cookies)

    async def close(self):
        self.closed = True


LISTING_URL = 'https://www.infocasas.com.bo/alquiler'
PAGINATION = 'ul.search-results-pagination li a.ant-pagination-item-link'
CARDS = 'a.lc-cardCover'
LD_JSON = 'script[type="application/ld+json"]'
ROWS = '.technical-sheet .ant-row'
SUMMARY = 'span.ant-typography.ant-typography-ellipsis.ant-typography-ellipsis-single-line'


def listing_page(page_numbers=(), cards=()):
    """InfoCasas 列表页"""
    return {
        'attrs': {(PAGINATION, 'href'): [f"/alquiler/pagina{n}" for n in page_numbers]},
        'links': {CARDS: list(cards)},
    }


def detail_page(name='Departamento en Equipetrol', price='Bs 3.500', operation='Alquiler',
                geo=None, rows=None, og_title=None, h1=None):
    """InfoCasas 详情页"""
    structured = {'object': {'geo': geo or {'latitude': -17.7675, 'longitude': -63.1961}}}
    if name:
        structured['object']['name'] = name

    page = {
        'text': {
            '.ant-typography.property-description': 'Amplio departamento',
            '.ant-typography.price strong': price,
            '.ant-typography.ant-typography-secondary.operation_type': operation,
        },
        'texts': {
            '.property-location-tag p': ['Equipetrol', 'Santa Cruz de la Sierra'],
            SUMMARY: ['3 Dorm.', '2 Baños', '120 m²'],
        },
        'rows': {
            ROWS: rows if rows is not None else [
                ('Tipo de Propiedad', 'Departamento'),
                ('Dormitorios', '3'),
                ('Garajes', None),
            ],
        },
        'blocks': {LD_JSON: json.dumps(structured)},
        'attr': {},
    }
    if og_title:
        page['attr'][('meta[property="og:title"]', 'content')] = og_title
    if h1:
        page['text']['h1'] = h1
    return page


@pytest.fixture
def site():
    return FakeSite()


@pytest.fixture
def session(site):
    return FakeSession(site)
