"""Business logic services for the Inkwell application."""

from .analytics import AnalyticsService
from .comment_service import CommentService
from .engagement import EngagementAggregator
from .interactions import InteractionService, LikeTarget
from .post_service import PostService
from .recommendation import RecommendationEngine
from .social_graph import SocialGraphManager

__all__ = [
    "AnalyticsService",
    "CommentService",
    "EngagementAggregator",
    "InteractionService",
    "LikeTarget",
    "PostService",
    "RecommendationEngine",
    "SocialGraphManager",
]
