"""JATS dialect: documents declaring one of the supported JATS DOCTYPEs."""

from .authors import JatsAuthorExtractor
from .parser import JATS_DOCTYPES, JatsParser

__all__ = ["JATS_DOCTYPES", "JatsAuthorExtractor", "JatsParser"]
