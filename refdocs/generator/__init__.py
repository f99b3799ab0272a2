"""Utilities for rendering extra pages and documentation nodes into documents."""

from .heading_anchors import HeadingAnchorExtension
from .page_renderer import AssetNames, MemberSection, PageRenderer, member_sections
from .renderer import HtmlContentRenderer, RenderedDocument

__all__ = [
    "AssetNames",
    "HeadingAnchorExtension",
    "HtmlContentRenderer",
    "MemberSection",
    "PageRenderer",
    "RenderedDocument",
    "member_sections",
]
