from sqlalchemy import JSON, Boolean, Column, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from dms.database import Base


class Document(Base):
    __tablename__ = "documents"

    id = Column(Text, primary_key=True)
    document_code = Column(Text, nullable=False, unique=True)
    title = Column(Text, nullable=False)
    description = Column(Text)
    document_type = Column(Text, nullable=False, default="General")
    classification = Column(Text)
    origin = Column(Text)
    status = Column(Text, nullable=False, default="dispatch")
    department_id = Column(Text, ForeignKey("departments.id"))
    created_by = Column(Text, ForeignKey("users.id"), nullable=False)
    remarks = Column(Text)
    # position ("first", "second", ..., "step6") -> department id
    work_flow = Column(JSON(none_as_null=True))
    work_flow_status = Column(JSON(none_as_null=True))
    received_by = Column(JSON(none_as_null=True))
    checked_out_by = Column(Text)
    checked_out_at = Column(Text)
    signed_at = Column(Text)
    signed_by = Column(Text)
    blockchain_status = Column(Text)
    archived_at = Column(Text)
    archived_by = Column(Text)
    deleted_at = Column(Text)
    deleted_by = Column(Text)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)

    department = relationship("Department")
    creator = relationship("User", foreign_keys=[created_by])
    files = relationship(
        "DocumentFile", back_populates="document",
        cascade="all, delete-orphan", order_by="DocumentFile.created_at",
    )
    trails = relationship(
        "DocumentTrail", back_populates="document",
        cascade="all, delete-orphan", order_by="DocumentTrail.action_date",
    )


class DocumentFile(Base):
    __tablename__ = "document_files"

    id = Column(Text, primary_key=True)
    document_id = Column(Text, ForeignKey("documents.id", ondelete="CASCADE"), nullable=False)
    original_filename = Column(Text, nullable=False)
    stored_path = Column(Text, nullable=False, unique=True)
    file_hash = Column(Text, nullable=False)
    file_size_bytes = Column(Integer, nullable=False)
    mime_type = Column(Text)
    is_primary = Column(Boolean, nullable=False, default=False)
    uploaded_by = Column(Text, ForeignKey("users.id"))
    created_at = Column(Text, nullable=False)

    document = relationship("Document", back_populates="files")


class DocumentTrail(Base):
    __tablename__ = "document_trails"

    id = Column(Text, primary_key=True)
    document_id = Column(Text, ForeignKey("documents.id", ondelete="CASCADE"), nullable=False)
    action_id = Column(Text, ForeignKey("document_actions.id", ondelete="SET NULL"))
    from_department = Column(Text, ForeignKey("departments.id", ondelete="SET NULL"))
    to_department = Column(Text, ForeignKey("departments.id", ondelete="SET NULL"))
    user_id = Column(Text, ForeignKey("users.id", ondelete="SET NULL"))
    status = Column(Text, nullable=False)
    remarks = Column(Text)
    action_date = Column(Text, nullable=False)

    document = relationship("Document", back_populates="trails")
    action = relationship("DocumentAction")
    from_dept = relationship("Department", foreign_keys=[from_department])
    to_dept = relationship("Department", foreign_keys=[to_department])
    user = relationship("User")
