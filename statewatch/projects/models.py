"""Projects table."""
from sqlalchemy import Column, Date, DateTime, Float, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Project(Base):
    __tablename__ = "projects"

    id = Column(String(32), primary_key=True)  # uuid4 hex, assigned by the repository
    name = Column(String(255), nullable=False, index=True)
    state_id = Column(String(64), nullable=False, index=True)
    location = Column(String(255))
    branch = Column(String(128))
    type = Column(String(32), nullable=False, index=True)
    status = Column(String(32), nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date)
    budget = Column(Float, nullable=False, default=0)
    disbursed = Column(Float, nullable=False, default=0)
    contractor = Column(String(255), nullable=False)
    officer = Column(String(255))
    description = Column(Text, nullable=False)
    progress = Column(Float, nullable=False, default=0)  # percent, 0-100 by convention
    planned_progress = Column(Float, nullable=False, default=0)

    created_by = Column(String(128))
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<Project {self.id} {self.name!r} ({self.state_id})>"
