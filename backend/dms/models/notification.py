from sqlalchemy import JSON, Boolean, Column, ForeignKey, Integer, Text
from dms.database import Base


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Text, primary_key=True)
    user_id = Column(Text, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title = Column(Text, nullable=False)
    message = Column(Text, nullable=False)
    type = Column(Text, nullable=False)
    workflow_event = Column(Text)
    # "metadata" is reserved on declarative classes
    metadata_ = Column("metadata", JSON(none_as_null=True))
    is_read = Column(Boolean, nullable=False, default=False)
    read_at = Column(Text)
    is_deleted = Column(Boolean, nullable=False, default=False)
    created_at = Column(Text, nullable=False)


class SavedSearch(Base):
    __tablename__ = "saved_searches"

    id = Column(Text, primary_key=True)
    user_id = Column(Text, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    name = Column(Text, nullable=False)
    description = Column(Text)
    query = Column(Text, nullable=False, default="")
    filters = Column(JSON(none_as_null=True))
    last_run = Column(Text)
    results_count = Column(Integer, nullable=False, default=0)
    is_favorite = Column(Boolean, nullable=False, default=False)
    is_scheduled = Column(Boolean, nullable=False, default=False)
    schedule_frequency = Column(Text)
    created_at = Column(Text, nullable=False)
