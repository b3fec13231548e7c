from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    Time,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    firebase_uid = Column(String(255), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    full_name = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    device_tokens = relationship(
        "DeviceToken", back_populates="user", cascade="all, delete-orphan"
    )


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    provider_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    date = Column(Date, nullable=True)
    start_time = Column(Time, nullable=True)
    end_time = Column(Time, nullable=True)
    price = Column(Float, nullable=True)  # Gross, tax-inclusive
    payment_method = Column(String(20), nullable=True)  # cash, card, ...
    status = Column(
        String(50), default="scheduled", nullable=False
    )  # scheduled, confirmed, in_progress, completed, cancelled
    # Cash closure: none -> pending_close -> resolved (never regresses)
    closure_state = Column(String(20), default="none", nullable=False, index=True)
    closure_due_at = Column(DateTime, nullable=True)
    # Written by the provider/client closure endpoints: none, no_show, ok, code_entered
    closure_provider_action = Column(String(30), default="none", nullable=True)
    closure_client_action = Column(String(30), default="none", nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    client = relationship("User", foreign_keys=[client_id])
    provider = relationship("User", foreign_keys=[provider_id])


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    appointment_id = Column(Integer, ForeignKey("appointments.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    provider_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Float, nullable=False)  # Gross
    tax_amount = Column(Float, default=0)
    commission_amount = Column(Float, default=0)
    provider_amount = Column(Float, default=0)  # Net to provider
    currency = Column(String(10), default="CLP")
    payment_method = Column(String(20), nullable=False)
    status = Column(String(30), default="pending")  # pending, completed, refunded, failed
    paid_at = Column(DateTime, nullable=True)
    can_release = Column(Boolean, default=False)
    release_status = Column(String(30), default="pending")  # pending, eligible, released
    created_at = Column(DateTime, server_default=func.now())

    appointment = relationship("Appointment")


class ProviderCommissionDebt(Base):
    """Commission owed to the platform for a cash-settled appointment"""

    __tablename__ = "provider_commission_debts"

    id = Column(Integer, primary_key=True, index=True)
    provider_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    appointment_id = Column(Integer, ForeignKey("appointments.id"), nullable=False)
    payment_id = Column(Integer, ForeignKey("payments.id"), nullable=True)
    commission_amount = Column(Float, nullable=False)
    settled_amount = Column(Float, default=0, nullable=False)
    currency = Column(String(10), default="CLP")
    status = Column(
        String(30), default="pending"
    )  # pending, overdue, under_review, rejected, paid, cancelled
    due_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    payment = relationship("Payment")


class PlatformSetting(Base):
    __tablename__ = "platform_settings"

    id = Column(Integer, primary_key=True, index=True)
    setting_key = Column(String(100), unique=True, nullable=False, index=True)
    setting_value = Column(String(255), nullable=True)


class Notification(Base):
    """In-app notification (notification bell)"""

    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    type = Column(String(50), default="system")
    title = Column(String(255), nullable=False)
    body = Column(Text, nullable=True)
    data = Column(JSON, nullable=True)
    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class DeviceToken(Base):
    __tablename__ = "device_tokens"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    token = Column(String(500), unique=True, nullable=False)
    platform = Column(String(20), nullable=True)  # ios, android, web
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="device_tokens")
