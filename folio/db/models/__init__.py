from folio.db.models.page import Page

__all__ = ["Page"]
