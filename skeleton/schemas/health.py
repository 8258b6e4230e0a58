from datetime import datetime
from pydantic import BaseModel


class DatabaseHealth(BaseModel):
    status: str
    timestamp: datetime
    database: str
    uptime: str
