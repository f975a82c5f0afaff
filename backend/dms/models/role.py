from sqlalchemy import Boolean, Column, ForeignKey, Text
from sqlalchemy.orm import relationship
from dms.database import Base


class Permission(Base):
    __tablename__ = "permissions"

    id = Column(Text, primary_key=True)
    permission = Column(Text, nullable=False, unique=True)
    description = Column(Text)


class Role(Base):
    __tablename__ = "roles"

    id = Column(Text, primary_key=True)
    name = Column(Text, nullable=False, unique=True)
    code = Column(Text, nullable=False, unique=True)
    description = Column(Text)
    is_system_role = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_by = Column(Text)
    updated_by = Column(Text)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)

    role_permissions = relationship("RolePermission", back_populates="role", cascade="all, delete-orphan")
    assignments = relationship("UserRole", back_populates="role", cascade="all, delete-orphan")


class RolePermission(Base):
    __tablename__ = "role_permissions"

    id = Column(Text, primary_key=True)
    role_id = Column(Text, ForeignKey("roles.id", ondelete="CASCADE"), nullable=False)
    permission_id = Column(Text, ForeignKey("permissions.id", ondelete="CASCADE"), nullable=False)
    scope = Column(Text, nullable=False, default="global")
    granted_by = Column(Text)
    granted_at = Column(Text, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    role = relationship("Role", back_populates="role_permissions")
    permission = relationship("Permission")


class UserRole(Base):
    __tablename__ = "user_roles"

    id = Column(Text, primary_key=True)
    user_id = Column(Text, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    role_id = Column(Text, ForeignKey("roles.id", ondelete="CASCADE"), nullable=False)
    assigned_by = Column(Text)
    assigned_at = Column(Text, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    expires_at = Column(Text)

    user = relationship("User", back_populates="role_assignments")
    role = relationship("Role", back_populates="assignments")
