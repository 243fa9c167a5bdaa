from datetime import datetime, timezone
from flask_login import UserMixin
from sqlalchemy import func
from community_hub.extensions import db, login_manager

class User(db.Model, UserMixin):
    """Caller identity. Credentials live with the external auth provider."""
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False, unique=True)
    display_name = db.Column(db.String(255), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now(),
                           default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now(),
                           default=lambda: datetime.now(timezone.utc), onupdate=func.now())

    def get_id(self) -> str:
        return str(self.id)

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r}>"

@login_manager.user_loader
def load_user(user_id: str):
    try:
        return db.session.get(User, int(user_id))
    except (TypeError, ValueError):
        return None
