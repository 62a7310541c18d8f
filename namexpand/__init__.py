"""
Namexpand: Author-Name Query Expansion

Expands author-name queries so that accented/ascii, complete/truncated and
historically varied spellings of a person's name resolve to the same indexed
records, with an opt-in exact-match mode.
"""

__version__ = "0.1.0"

__all__ = ["AuthorNameExpander"]

def __getattr__(name):
    """Lazy import to avoid eager loading of pypinyin."""
    if name == "AuthorNameExpander":
        from .expander import AuthorNameExpander
        return AuthorNameExpander
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
