"""
Adapters package for Local Gov Watch.

This package contains all source adapters that implement
the BaseAdapter interface, plus the parser registry.
"""

from .base_adapter import BaseAdapter, ListingAdapter
from .austin_meetings import AustinMeetingsAdapter
from .austin_ordinances import AustinOrdinancesAdapter
from .legistar_meetings import LegistarMeetingsAdapter
from .legistar_legislation import LegistarLegislationAdapter
from .texas_bills import TexasBillsAdapter
from .travis_elections import TravisElectionsAdapter
from .registry import ADAPTERS, get_adapter_class, build_adapter

__all__ = [
    "BaseAdapter",
    "ListingAdapter",
    "AustinMeetingsAdapter",
    "AustinOrdinancesAdapter",
    "LegistarMeetingsAdapter",
    "LegistarLegislationAdapter",
    "TexasBillsAdapter",
    "TravisElectionsAdapter",
    "ADAPTERS",
    "get_adapter_class",
    "build_adapter",
]
