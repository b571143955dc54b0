# declarative base for every table owned by the service
from sqlalchemy.orm import DeclarativeBase

class MainDB_Base(DeclarativeBase):
    pass
