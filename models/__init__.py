from .db import db
from .user import User
from .login_log import LoginLog
