from secdc.types.symbol import Symbol
from secdc.types.scope import Scope

__all__ = ["Symbol", "Scope"]
