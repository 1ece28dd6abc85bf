import os
from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict


class TokenSettings(BaseModel):
    """
    Static configuration of a monitored ERC20 token.

    Attributes
    ----------
    address : str
        Token contract address
    decimals : int
        Number of decimals used to scale raw amounts
    """
    address: str
    decimals: int


DEFAULT_TOKENS = {
    "DAI": TokenSettings(address="0x1D70D57ccD2798323232B2dD027B3aBcA5C00091", decimals=18),
    "USDC": TokenSettings(address="0xC891481A0AaC630F4D89744ccD2C7D2C4215FD47", decimals=6),
}


class Settings(BaseSettings):
    """
    Application settings using Pydantic Settings.

    Attributes
    ----------
    rpc_base_url : str
        Base RPC URL (network path will be added automatically)
    rpc_network : str
        Network path segment of the RPC URL
    ankr_api_key : str
        Ankr API key for RPC access
    required_chain_id : int
        Chain the tokens are deployed on (Sepolia by default)
    event_block_window : int
        How many blocks back from the tip events are scanned
    retry_max_attempts : int
        Attempts per log or block lookup before giving up
    retry_base_delay : float
        Backoff unit in seconds, the n-th retry waits n units
    log_level : str
        Level of the service logger
    display_precision : int
        Fraction digits kept in display amounts
    explorer_tx_url : str
        Prefix of transaction links
    tokens : dict[str, TokenSettings]
        Token registry, symbol to address and decimals
    """

    rpc_base_url: str = "https://rpc.ankr.com"
    rpc_network: str = "eth_sepolia"
    ankr_api_key: str

    required_chain_id: int = 11155111

    event_block_window: int = 500
    retry_max_attempts: int = 3
    retry_base_delay: float = 1.0

    log_level: str = "INFO"

    display_precision: int = 4
    explorer_tx_url: str = "https://sepolia.etherscan.io/tx/"

    tokens: dict[str, TokenSettings] = DEFAULT_TOKENS

    model_config = SettingsConfigDict(
        env_file=os.getenv("ENV_FILE", ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False
    )

    def get_rpc_url(self) -> str:
        """
        Get RPC URL for the configured network.

        Returns
        -------
        str
            Full RPC URL with API key
        """
        return f"{self.rpc_base_url}/{self.rpc_network}/{self.ankr_api_key}"
