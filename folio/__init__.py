"""Folio - a personal page builder with draft/publish page documents."""

__version__ = "0.1.0"
