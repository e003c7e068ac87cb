from sample_app.models.post import Post
from sample_app.models.schemas import UserRead
from sample_app.models.tag import PostTag, Tag, TagKind
from sample_app.models.user import User

__all__ = ["Post", "PostTag", "Tag", "TagKind", "User", "UserRead"]
