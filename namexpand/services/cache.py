"""
Romanization cache service for Han-script author names.

This module provides fast Han character to toneless pinyin conversion with
memoisation, used when variant generation meets a run of Han characters.
"""
from __future__ import annotations

from functools import cache

import pypinyin

from namexpand.types import ExpansionConfig


@cache  # one entry per unique Han character
def _char_to_pinyin(ch: str) -> str:
    return pypinyin.lazy_pinyin(ch, style=pypinyin.Style.NORMAL)[0]


class PinyinCacheService:
    """
    * deterministic, thread‑safe, O(1) repeated look‑ups
    """

    def __init__(self, config: ExpansionConfig):
        self._config = config

    # ---------- public API ----------
    def han_to_pinyin_fast(self, han_str: str) -> list[str]:
        """Return pinyin for every character, memoising on first sight."""
        return [_char_to_pinyin(c) for c in han_str]

    def romanize(self, han_str: str) -> str:
        """Romanize a Han run as one fused word ("小龙" -> "xiaolong")."""
        return "".join(self.han_to_pinyin_fast(han_str))

    def is_han(self, ch: str) -> bool:
        return bool(self._config.cjk_pattern.match(ch))

    @property
    def cache_size(self) -> int:
        return _char_to_pinyin.cache_info().currsize
