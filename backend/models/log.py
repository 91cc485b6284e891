from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, Uuid, func
from sqlalchemy.orm import relationship
from database import Base

# Audit trail of API actions (signup, login, product and storage writes).
# Entries outlive the identity that produced them: user_id is nulled on delete.
class Log(Base):
    __tablename__ = "logs"

    id = Column(Integer, primary_key=True, index=True)
    ts = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    # e.g. action="PURCHASE", resource="products", status="FAIL"
    action = Column(String(50), index=True)
    resource = Column(String(50), index=True)
    status = Column(String(20), index=True)
    ip = Column(String(64), nullable=True)
    meta = Column(JSON, nullable=True)

    user = relationship("User")
