from .config import Config
from .frontier import UrlFrontier
from .items import ExtractionFailure, HarvestResult, ListingSource, PRICE_ON_REQUEST, Record
from .orchestrator import HarvestOrchestrator, HarvestState
from .pipeline import HarvestPipeline
from .retry import with_retries

__all__ = [
    'Config',
    'ExtractionFailure',
    'HarvestOrchestrator',
    'HarvestPipeline',
    'HarvestResult',
    'HarvestState',
    'ListingSource',
    'PRICE_ON_REQUEST',
    'Record',
    'UrlFrontier',
    'with_retries',
]
