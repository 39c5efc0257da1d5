from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from dotenv import load_dotenv
import os

# Load environment variables
load_dotenv()

# Get database credentials from environment
DB_HOST = os.getenv("DB_HOST", "localhost")
DB_PORT = os.getenv("DB_PORT", "5432")
DB_USER = os.getenv("DB_USER", "postgres")
DB_PASSWORD = os.getenv("DB_PASSWORD")
DB_NAME = os.getenv("DB_NAME", "school_messaging_db")
DB_ECHO = os.getenv("DB_ECHO", "false").lower() == "true"

# Create database URL (DATABASE_URL wins when set, e.g. sqlite for local runs)
DATABASE_URL = os.getenv(
	"DATABASE_URL",
	f"postgresql://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}",
)

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

# Create SQLAlchemy engine
engine = create_engine(DATABASE_URL, echo=DB_ECHO, connect_args=connect_args)

# Create SessionLocal class
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Create Base class for models
Base = declarative_base()

# Dependency to get database session
def get_db():
	db = SessionLocal()
	try:
		yield db
	finally:
		db.close()


# Import all models here to ensure they are registered with SQLAlchemy's Base
from models.auth import student_models, teacher_models
from models.classroom import classroom_models
from models.messaging import message_models

# Function to create all tables
def create_tables():
	Base.metadata.create_all(bind=engine)
