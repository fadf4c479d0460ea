"""apigraph - Interactive graphs of API descriptions.

apigraph compiles OpenAPI-style documents into stable node/edge graphs of
path segments, operations and payload schemas, with collapsible subtrees
and layered layout.
"""

__version__ = "0.1.0"
__description__ = "Collapsible node/edge graphs of API descriptions"

from apigraph.config import ApigraphConfig

__all__ = [
    "__version__",
    "__description__",
    "ApigraphConfig",
]
