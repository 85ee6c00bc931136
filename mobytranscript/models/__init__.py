from .project import Project
from .user import User
# base and mixins are imported by the above as needed
