from models.db import db


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)

    login = db.Column(db.String(255), unique=True, nullable=False, index=True)

    # hex sha256 of "<password>:<salt>"
    password_hash = db.Column(db.String(64), nullable=False)
    salt = db.Column(db.String(255), nullable=False)

    def to_dict(self):
        return {"id": self.id, "login": self.login}
