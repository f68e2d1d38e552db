from app.models.file_record import FileRecord
from app.models.user import User

__all__ = ["FileRecord", "User"]
