from agrichannel.models.account import Account
from agrichannel.models.post import Post

__all__ = ["Account", "Post"]
