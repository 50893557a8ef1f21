"""
Analyzer formatting components.
"""

from .narrative_formatter import TemplateNarrativeFormatter, display_name, market_summary

__all__ = [
    'TemplateNarrativeFormatter',
    'display_name',
    'market_summary',
]
