from .content_fetcher import ContentFetcherPort

__all__ = ["ContentFetcherPort"]
