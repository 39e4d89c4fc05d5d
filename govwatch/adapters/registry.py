"""
Parser registry.

Maps the parser_key stored on a source row to its adapter class.

Responsibility: Resolve and construct adapters for configured sources
"""

from datetime import datetime
from typing import Dict, Optional, Type

from .base_adapter import BaseAdapter
from .austin_meetings import AustinMeetingsAdapter
from .austin_ordinances import AustinOrdinancesAdapter
from .legistar_meetings import LegistarMeetingsAdapter
from .legistar_legislation import LegistarLegislationAdapter
from .texas_bills import TexasBillsAdapter
from .travis_elections import TravisElectionsAdapter
from ..config import IngestConfig
from ..exceptions import UnknownParserError
from ..utils.http_client import PoliteFetcher

ADAPTERS: Dict[str, Type[BaseAdapter]] = {
    adapter.source_name: adapter
    for adapter in (
        AustinMeetingsAdapter,
        AustinOrdinancesAdapter,
        LegistarMeetingsAdapter,
        LegistarLegislationAdapter,
        TexasBillsAdapter,
        TravisElectionsAdapter,
    )
}


def get_adapter_class(parser_key: str) -> Type[BaseAdapter]:
    try:
        return ADAPTERS[parser_key]
    except KeyError:
        raise UnknownParserError(f"No adapter registered for parser key '{parser_key}'") from None


def build_adapter(
    parser_key: str,
    fetcher: PoliteFetcher,
    url: Optional[str] = None,
    ingest_config: Optional[IngestConfig] = None,
    now: Optional[datetime] = None,
) -> BaseAdapter:
    """Construct the adapter for a source's parser key"""
    adapter_class = get_adapter_class(parser_key)
    return adapter_class(fetcher, url=url, ingest_config=ingest_config, now=now)
