"""
Static copy generation for cloned sites.
"""

from .rewriter import StaticRewriter, RewriteResult, rewrite_href

__all__ = [
    "StaticRewriter",
    "RewriteResult",
    "rewrite_href",
]
