# tests/host_models.py
"""Host-application models used by the test suite."""

from sqlalchemy import Column, Integer, String, Text

from localizable.db.models.base import Base, LocalizableMixin


class Post(Base, LocalizableMixin):
    __tablename__ = "posts"
    __localizable__ = ["title", "body"]

    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=True)
    body = Column(Text, nullable=True)


class Page(Base, LocalizableMixin):
    __tablename__ = "pages"
    __localizable__ = ["heading", "heading", "summary"]
    __localizable_type__ = "cms_page"

    id = Column(Integer, primary_key=True)
    heading = Column(String(255), nullable=True)
