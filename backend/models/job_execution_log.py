"""Job execution history."""
from sqlalchemy import Column, Integer, String, DateTime, Float, Text

from core.database import Base
from core.timezone import now_utc


class JobExecutionLog(Base):
    __tablename__ = "job_execution_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    run_id = Column(String(36), unique=True, nullable=False)
    job_name = Column(String(100), nullable=False, index=True)
    trigger = Column(String(20), nullable=False)  # event, schedule
    status = Column(String(20), nullable=False, default="pending")  # pending, running, succeeded, failed_retryable, failed_terminal
    attempts = Column(Integer, nullable=False, default=0)
    started_at = Column(DateTime, nullable=False, default=now_utc)
    finished_at = Column(DateTime, nullable=True)
    duration_seconds = Column(Float, nullable=True)
    error_message = Column(Text, nullable=True)
