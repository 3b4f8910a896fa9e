from .user import User
from .user_role import UserRole
from .role_access import RoleAccess
from .blog import BlogPost
