"""
Built-in provider registry: configuration name -> provider factory.
"""

from typing import Dict

from .agents import AgentTools
from .citations import CitationTools
from .credits import CreditTools
from .marketplace import MarketplaceTools
from .papers import PaperTools
from .platform import PlatformTools
from .reviews import ReviewTools
from .search import SearchTools
from .users import UserTools

BUILTIN_PROVIDERS: Dict[str, type] = {
    "search": SearchTools,
    "papers": PaperTools,
    "agents": AgentTools,
    "reviews": ReviewTools,
    "citations": CitationTools,
    "marketplace": MarketplaceTools,
    "credits": CreditTools,
    "users": UserTools,
    "platform": PlatformTools,
}
