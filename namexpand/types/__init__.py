"""
Types package for author-name expansion.

This package contains token and result types, configuration classes, and
other data structures used throughout the expansion pipelines.
"""

from namexpand.types.config import ExpansionConfig
from namexpand.types.results import (
    ExpansionResult,
    GivenPart,
    ParsedName,
    ParseResult,
    StageSnapshot,
    TableInfo,
    Token,
    TokenType,
)

__all__ = [
    "ExpansionConfig",
    "ExpansionResult",
    "GivenPart",
    "ParseResult",
    "ParsedName",
    "StageSnapshot",
    "TableInfo",
    "Token",
    "TokenType",
]
