# db_init.py
from pathlib import Path

from config import Config
from models import Base, make_engine

def main():
    # Ensure instance/ exists for SQLite local dev
    if Config.SQLALCHEMY_DATABASE_URI.startswith("sqlite"):
        Path("instance").mkdir(parents=True, exist_ok=True)

    # Ensure the reports dir exists for PDFs
    Path(Config.REPORTS_DIR).mkdir(parents=True, exist_ok=True)

    engine = make_engine(Config.SQLALCHEMY_DATABASE_URI, echo=Config.SQLALCHEMY_ECHO)
    Base.metadata.create_all(engine)

    print("✅ Report ledger initialized.")
    print(f"DB: {Config.SQLALCHEMY_DATABASE_URI}")
    print(f"Reports dir: {Config.REPORTS_DIR}")

if __name__ == "__main__":
    main()
