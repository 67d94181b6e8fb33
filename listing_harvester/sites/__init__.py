from ..items import ListingSource
from .infocasas import InfoCasasExtractor, InfoCasasPaginator
from .propertyguru import PropertyGuruExtractor, PropertyGuruPaginator

SITES = {
    'infocasas': (InfoCasasPaginator, InfoCasasExtractor),
    'propertyguru': (PropertyGuruPaginator, PropertyGuruExtractor),
}


def build_source(site, url):
    """根据站点名创建 ListingSource"""
    if site not in SITES:
        raise ValueError(f"未知的站点: {site}")
    paginator_cls, extractor_cls = SITES[site]
    return ListingSource(url=url, site=site, paginator=paginator_cls(), extractor=extractor_cls())
