from sqlalchemy import Boolean, Column, Text
from sqlalchemy.orm import relationship
from dms.database import Base


class Department(Base):
    __tablename__ = "departments"

    id = Column(Text, primary_key=True)
    name = Column(Text, nullable=False)
    code = Column(Text, nullable=False, unique=True)
    active = Column(Boolean, nullable=False, default=True)
    created_by = Column(Text)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)

    users = relationship("User", back_populates="department")
