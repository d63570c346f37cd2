"""A++ dialect: the legacy publisher format rooted at ``Publisher/Journal``."""

from .authors import AplusplusAuthorExtractor
from .parser import AplusplusParser

__all__ = ["AplusplusAuthorExtractor", "AplusplusParser"]
