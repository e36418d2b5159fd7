"""Comments on shared PDFs."""

from .routes import CommentRequest, create_comment_router
from .service import CommentService, CommentView

__all__ = [
    'CommentRequest',
    'CommentService',
    'CommentView',
    'create_comment_router',
]
