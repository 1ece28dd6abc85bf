from typing import Iterator
from core.environment.config import TokenSettings
from core.exceptions import TokenNotSupportedException
from token_events.entities import TokenConfig


class TokenRegistry:
    """
    Read-only mapping of token symbols to their contracts.

    Parameters
    ----------
    tokens : dict[str, TokenSettings]
        Symbol to address and decimals, usually taken from settings
    """

    def __init__(self, tokens: dict[str, TokenSettings]):
        self._tokens = {
            symbol: TokenConfig(symbol=symbol, address=cfg.address, decimals=cfg.decimals)
            for symbol, cfg in tokens.items()
        }

    def __iter__(self) -> Iterator[TokenConfig]:
        return iter(self._tokens.values())

    def __len__(self) -> int:
        return len(self._tokens)

    def get(self, symbol: str) -> TokenConfig:
        """
        Get token by symbol.

        Parameters
        ----------
        symbol : str
            Token symbol, case-insensitive

        Returns
        -------
        TokenConfig
            Token configuration

        Raises
        ------
        TokenNotSupportedException
            If the symbol is not registered
        """
        token = self._tokens.get(symbol) or self._tokens.get(symbol.upper())
        if token is None:
            raise TokenNotSupportedException()
        return token
