from .box import MediaBox
from .content import MediaContent
from .user import User
