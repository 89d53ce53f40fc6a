import logging
from sqlalchemy.orm import Session


class BaseService:
    """Common plumbing for services bound to a request session."""

    def __init__(self, db: Session):
        self.db = db
        self._logger = logging.getLogger(self.__class__.__module__)

    def log_info(self, message: str):
        self._logger.info(message)

    def log_warning(self, message: str):
        self._logger.warning(message)
