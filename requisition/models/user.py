# requisition/models/user.py
"""
Users table: employees who submit trip requests and admins who decide them.
Role is fixed at creation; there is no role-change operation.
"""

import enum
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime
from requisition.database import Base


class UserRole(str, enum.Enum):
    EMPLOYEE = "employee"
    ADMIN = "admin"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.EMPLOYEE.value)  # employee | admin
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self):
        return f"<User {self.id} {self.email} role={self.role}>"
