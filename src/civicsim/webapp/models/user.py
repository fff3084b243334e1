"""User model for authentication."""

from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError
from flask_login import UserMixin

from civicsim.clock import utcnow

from ..extensions import db, login_manager

ph = PasswordHasher()


class User(UserMixin, db.Model):
    """User account model.

    ``total_points`` accumulates points awarded for completed simulations and
    earned achievements; it drives the all-time leaderboard.
    """

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    name = db.Column(db.String(128), nullable=True)
    phone_number = db.Column(db.String(32), nullable=True)
    password_hash = db.Column(db.String(256), nullable=False)
    total_points = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=utcnow)

    completions = db.relationship("SimulationCompletion", backref="user", lazy="dynamic")

    def set_password(self, password: str) -> None:
        """Hash and store password using argon2."""
        self.password_hash = ph.hash(password)

    def check_password(self, password: str) -> bool:
        """Verify password against stored hash."""
        try:
            ph.verify(self.password_hash, password)
            # Rehash if parameters have changed
            if ph.check_needs_rehash(self.password_hash):
                self.password_hash = ph.hash(password)
            return True
        except VerifyMismatchError:
            return False

    @property
    def display_name(self) -> str:
        return self.name or self.username

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "name": self.name,
            "phone_number": self.phone_number,
            "total_points": self.total_points,
        }

    def __repr__(self) -> str:
        return f"<User {self.username}>"


@login_manager.user_loader
def load_user(user_id: str) -> User | None:
    """Load user by ID for Flask-Login."""
    return db.session.get(User, int(user_id))
