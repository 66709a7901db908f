from .health import health_bp
from .auth import auth_bp
from .report import report_bp
