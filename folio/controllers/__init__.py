from folio.controllers.page_api import PageApiController
from folio.controllers.web import PageWebController

__all__ = ["PageApiController", "PageWebController"]
