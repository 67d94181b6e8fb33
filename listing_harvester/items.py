from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

# 价格缺失时的占位值，和空字符串含义不同
PRICE_ON_REQUEST = 'ask'

SALE = 'sale'
RENT = 'rent'

# 固定字段，导出时按此顺序排在最前
CANONICAL_FIELDS = (
    'url',
    'name',
    'description',
    'address',
    'price',
    'area',
    'property_type',
    'transaction_type',
    'latitude',
    'longitude',
)


def detail_key(key, taken):
    """重名标签的新键：detail_<key>，仍被占用时依次加 _2、_3"""
    candidate = f'detail_{key}'
    suffix = 2
    while candidate in taken:
        candidate = f'detail_{key}_{suffix}'
        suffix += 1
    return candidate


@dataclass(frozen=True)
class ListingSource:
    """一个列表入口：URL + 站点的分页策略和详情页解析器"""
    url: str
    site: str
    paginator: Any
    extractor: Any


@dataclass(frozen=True)
class Record:
    # 核心字段
    url: str
    name: str = ''
    description: str = ''
    address: str = ''
    price: str = PRICE_ON_REQUEST
    area: str = ''
    property_type: str = ''
    transaction_type: str = RENT

    # 位置信息
    latitude: str = ''
    longitude: str = ''

    # 技术参数表（标签 -> 值），以及卡片上的简要特征
    details: Dict[str, str] = field(default_factory=dict)
    features: Tuple[str, ...] = ()

    def canonical(self):
        """只取固定字段"""
        return {name: getattr(self, name) for name in CANONICAL_FIELDS}


@dataclass(frozen=True)
class ExtractionFailure:
    url: str
    stage: str
    error: str
    attempts: int = 0


@dataclass
class HarvestResult:
    """单个列表来源一次采集的结果"""
    source_url: str
    records: List[Record] = field(default_factory=list)
    failures: List[ExtractionFailure] = field(default_factory=list)
    attempted: int = 0

    # 分页统计
    page_count: int = 0
    pages_failed: int = 0
    empty_pages: int = 0
    urls_discovered: int = 0
    urls_rejected: int = 0

    @property
    def succeeded(self) -> int:
        return len(self.records)

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def completion_rate(self) -> str:
        if self.attempted == 0:
            return "0%"
        return f"{self.succeeded / self.attempted * 100:.2f}%"

    def stats(self) -> Dict[str, Any]:
        return {
            "source_url": self.source_url,
            "page_count": self.page_count,
            "pages_failed": self.pages_failed,
            "empty_pages": self.empty_pages,
            "urls_discovered": self.urls_discovered,
            "urls_rejected": self.urls_rejected,
            "attempted": self.attempted,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "completion_rate": self.completion_rate,
        }
