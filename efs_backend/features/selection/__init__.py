from .selector import RandomSelector

__all__ = ["RandomSelector"]
