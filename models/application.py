from sqlalchemy import Column, Date, DateTime, Float, Integer, String, Text, func

from database import Base


class LoanApplication(Base):
    __tablename__ = "loan_applications"

    id = Column(String(64), primary_key=True, index=True)
    # Capability for unauthenticated status reads; never serialized outside creation
    client_token = Column(String(128), nullable=False)
    full_name = Column(String(256), nullable=False)
    cpf = Column(String(32), nullable=False)
    email = Column(String(320), nullable=False)
    loan_type = Column(String(16), nullable=False)
    status = Column(String(16), nullable=False, default="pending", index=True)
    approved_amount = Column(Float, nullable=True)
    # KYC supplement, written by an admin together with approval
    address = Column(Text, nullable=True)
    age = Column(Integer, nullable=True)
    birth_date = Column(Date, nullable=True)
    mother_name = Column(String(256), nullable=True)
    gender = Column(String(32), nullable=True)
    cpf_status = Column(String(64), nullable=True)
    cns_number = Column(String(32), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
