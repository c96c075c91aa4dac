"""Error log database model"""
from sqlalchemy import Column, DateTime, Index, Integer, String, Text
from errorlog.db.database import Base

# Maximum stored length of each narrow column
COLUMN_LIMITS = {
    "application": 60,
    "host": 30,
    "type": 100,
    "source": 60,
    "message": 500,
    "user": 50,
}


class ErrorLogRecord(Base):
    """
    One logged error.
    
    The narrow columns are a lossy index for listing; ``all_xml`` holds the
    complete error and is the only source used to rebuild it in full.
    """
    __tablename__ = "error_log"
    
    id = Column(Integer, primary_key=True)
    application = Column(String(60), nullable=False)
    host = Column(String(50), nullable=False)
    type = Column(String(100), nullable=False)
    source = Column(String(60), nullable=False)
    message = Column(String(500), nullable=False)
    user = Column(String(50), nullable=False)
    status_code = Column(Integer, nullable=False)
    time_utc = Column(DateTime, nullable=False)
    all_xml = Column(Text, nullable=False)
    
    __table_args__ = (
        Index("ix_error_log_time_utc_id", time_utc.desc(), id.desc()),
        {"sqlite_autoincrement": True},
    )
    
    def __repr__(self):
        return f"<ErrorLogRecord(id={self.id}, type={self.type}, time_utc={self.time_utc})>"
