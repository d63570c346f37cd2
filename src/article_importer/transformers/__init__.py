"""Transformers for rendering article markup."""

from .jats_html_transformer import JatsHTMLTransformer

__all__ = ["JatsHTMLTransformer"]
