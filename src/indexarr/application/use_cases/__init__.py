from .torznab_api import TorznabApiUseCase

__all__ = ["TorznabApiUseCase"]
