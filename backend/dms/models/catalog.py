from sqlalchemy import Boolean, Column, Text
from dms.database import Base


class DocumentType(Base):
    __tablename__ = "document_types"

    id = Column(Text, primary_key=True)
    name = Column(Text, nullable=False, unique=True)
    description = Column(Text)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)


class DocumentAction(Base):
    __tablename__ = "document_actions"

    id = Column(Text, primary_key=True)
    action_name = Column(Text, nullable=False, unique=True)
    description = Column(Text)
    sender_tag = Column(Text)
    recipient_tag = Column(Text)
    action_date = Column(Text)
    status = Column(Boolean, nullable=False, default=True)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)
