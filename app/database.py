from collections.abc import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from app.config import settings

# SQLite預設只允許建立連線的執行緒使用該連線，
# FastAPI會在不同的執行緒處理同步路由，所以要關閉這個檢查
connect_args = (
    {"check_same_thread": False}
    if settings.DATABASE_URL.startswith("sqlite")
    else {}
)

# 建立與資料庫的底層連線池
engine = create_engine(settings.DATABASE_URL, connect_args=connect_args)
# 用來建立新的資料庫會話（Session）實例
#   - autocommit=False：不自動提交，需手動呼叫db.commit()
#   - autoflush=False：不自動將暫存的變更送出到資料庫
# 唯一性衝突（stored_file_name重複）時可以執行db.rollback()回滾變更
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


# 所有模型繼承同一個基底(這個Base class)
# 透過Base.metadata可一次取得所有資料表的定義
class Base(DeclarativeBase):
    pass


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        # 將 db 交給呼叫者（API路由函式），請求結束後回到這裡關閉連線
        yield db
    finally:
        db.close()
