# GUI Presentation Layer
"""
Presentation layer containing:
- View Models: Display-ready representations of jobs, stats and scraper runs
"""
from .view_models import (
    JobRowViewModel,
    ScraperControlViewModel,
    ScraperLogViewModel,
    StatCardViewModel,
    job_list_stat_cards,
    stat_cards,
)

__all__ = [
    'JobRowViewModel',
    'ScraperControlViewModel',
    'ScraperLogViewModel',
    'StatCardViewModel',
    'job_list_stat_cards',
    'stat_cards',
]
