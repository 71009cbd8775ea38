"""Page fetching — the rendered-HTML boundary of the pipeline."""

from jobkeywords.fetch.base import PageFetcher
from jobkeywords.fetch.browser import BrowserConfig, BrowserFetcher

__all__ = ["BrowserConfig", "BrowserFetcher", "PageFetcher"]
