import enum
from datetime import datetime
from werkzeug.security import generate_password_hash, check_password_hash
from wholesale import db, new_id


class RoleEnum(enum.Enum):
    ADMIN   = "ADMIN"
    MANAGER = "MANAGER"
    BUYER   = "BUYER"


class CompanyStatus(enum.Enum):
    PENDING   = "PENDING"
    ACTIVE    = "ACTIVE"
    SUSPENDED = "SUSPENDED"


class Company(db.Model):
    """A buyer company; orders and price overrides belong to one."""
    __tablename__ = 'companies'

    id         = db.Column(db.String(36), primary_key=True, default=new_id)
    name       = db.Column(db.String(200), nullable=False)
    vat_number = db.Column(db.String(40), nullable=True, unique=True)
    status     = db.Column(db.Enum(CompanyStatus), nullable=False, default=CompanyStatus.PENDING)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    users = db.relationship('User', backref='company', lazy='select')

    def __repr__(self) -> str:
        return f"<Company {self.name!r} {self.status.value}>"


class User(db.Model):
    """A merchant staff member (ADMIN/MANAGER) or a company buyer."""
    __tablename__ = 'users'

    id            = db.Column(db.String(36), primary_key=True, default=new_id)
    name          = db.Column(db.String(120), nullable=False)
    username      = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    role          = db.Column(db.Enum(RoleEnum), nullable=False, default=RoleEnum.BUYER)
    company_id    = db.Column(db.String(36), db.ForeignKey('companies.id'), nullable=True, index=True)
    created_at    = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    # ── Password helpers ──────────────────────────────────────────
    def set_password(self, plain_password: str) -> None:
        """Hash and store the password. Never stores plain text."""
        self.password_hash = generate_password_hash(plain_password)

    def check_password(self, plain_password: str) -> bool:
        """Return True if the supplied password matches the stored hash."""
        return check_password_hash(self.password_hash, plain_password)

    # ── Convenience ───────────────────────────────────────────────
    @property
    def is_staff(self) -> bool:
        return self.role in (RoleEnum.ADMIN, RoleEnum.MANAGER)

    def to_dict(self) -> dict:
        return {
            'id':        self.id,
            'name':      self.name,
            'username':  self.username,
            'role':      self.role.value,
            'companyId': self.company_id,
        }

    def __repr__(self) -> str:
        return f"<User {self.username!r} role={self.role.value!r}>"
