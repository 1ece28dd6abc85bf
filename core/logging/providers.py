import logging
import sys
from typing import Annotated
from dishka import Provider, provide, Scope, FromComponent

from core.environment.config import Settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class LoggerProvider(Provider):
    """
    Provider for the service logger.

    Configures console (stdout) logging once, at the level from settings.
    """
    component = "logger"

    @provide(scope=Scope.APP)
    def get_logger(
        self,
        settings: Annotated[Settings, FromComponent("environment")]
    ) -> logging.Logger:
        """
        Provide configured logger instance.

        Parameters
        ----------
        settings : Settings
            Application settings

        Returns
        -------
        logging.Logger
            Logger writing to console
        """
        if not logging.getLogger().handlers:
            logging.basicConfig(
                level=logging.INFO,
                format=LOG_FORMAT,
                handlers=[
                    logging.StreamHandler(sys.stdout)
                ]
            )

        logger = logging.getLogger("token_events")
        logger.setLevel(settings.log_level.upper())
        return logger
