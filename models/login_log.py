from datetime import datetime
from models.db import db

IP_MAX_LENGTH = 64


class LoginLog(db.Model):
    """One login attempt. Rows are only ever inserted."""

    __tablename__ = "login_log"

    # Autoincrement id is the ordering key for every lock/ban decision
    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    # NULL when the submitted login matched no user
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    # as submitted, any length
    login = db.Column(db.Text, nullable=False)
    ip = db.Column(db.String(IP_MAX_LENGTH), nullable=False)

    succeeded = db.Column(db.Boolean, nullable=False)

    __table_args__ = (
        db.Index("ix_login_log_user_id_id", "user_id", "id"),
        db.Index("ix_login_log_ip_id", "ip", "id"),
        db.Index("ix_login_log_user_id_succeeded_id", "user_id", "succeeded", "id"),
        db.Index("ix_login_log_ip_succeeded_id", "ip", "succeeded", "id"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "user_id": self.user_id,
            "login": self.login,
            "ip": self.ip,
            "succeeded": self.succeeded,
        }
