"""ASGI entry point, used by ``folio serve``."""

from folio.app_factory import create_app

app = create_app()
