# db/base.py
from sqlalchemy.orm import declarative_base

# ORM モデルはすべてこの Base を継承する
Base = declarative_base()
