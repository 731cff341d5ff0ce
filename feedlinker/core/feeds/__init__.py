"""Feed item processing: titles, categories and catalog links per show."""

from .models import RawFeedItem, TrackedShow
from .processor import FeedProcessor

__all__ = ["FeedProcessor", "RawFeedItem", "TrackedShow"]
