from sqlalchemy import Column, Integer, String, DateTime, func
from .db import Base


class Account(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), unique=True, nullable=False)
    # Salted hash only; the column keeps its historical name
    password_hash = Column("password", String(255), nullable=False)
    email = Column(String(100), nullable=True)
    phone = Column(String(20), nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
