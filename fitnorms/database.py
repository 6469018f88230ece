import os
from pathlib import Path
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base
from dotenv import load_dotenv

# Загружаем .env, лежащий РЯДОМ с этим файлом (важно при запуске из другого каталога)
load_dotenv(Path(__file__).with_name(".env"))

DATABASE_URL = os.getenv("DATABASE_URL")
LOG_LEVEL = os.getenv("FITNORMS_LOG_LEVEL", "INFO")
Base = declarative_base()

# Фолбэк на локальную SQLite, если переменная не задана
if not DATABASE_URL or not DATABASE_URL.strip():
    db_path = Path(__file__).with_name("fitnorms.db")
    DATABASE_URL = f"sqlite:///{db_path}"
    engine = create_engine(DATABASE_URL, connect_args={"check_same_thread": False})
else:
    engine = create_engine(DATABASE_URL, pool_pre_ping=True)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def configure_sqlite(target_engine) -> None:
    """
    Для SQLite: включаем проверку внешних ключей и отдаём управление транзакциями
    SQLAlchemy (иначе pysqlite некорректно работает с SAVEPOINT).
    """
    if target_engine.dialect.name != "sqlite":
        return

    @event.listens_for(target_engine, "connect")
    def _on_connect(dbapi_conn, _record):
        dbapi_conn.isolation_level = None
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(target_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


configure_sqlite(engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
