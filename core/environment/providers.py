from dishka import Provider, Scope, provide
from core.environment.config import Settings


class EnvironmentProvider(Provider):
    """
    Provider for environment configuration.

    Parameters
    ----------
    env_file : str | None
        Dotenv file to read instead of the ``ENV_FILE`` default
    """

    component = "environment"
    scope = Scope.APP

    def __init__(self, env_file: str | None = None):
        super().__init__()
        self.env_file = env_file

    @provide
    def get_environment(self) -> Settings:
        """
        Provide application settings.

        Returns
        -------
        Settings
            Settings read from environment and the dotenv file
        """
        if self.env_file:
            return Settings(_env_file=self.env_file)
        return Settings()
