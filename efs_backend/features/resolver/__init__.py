from .service import ItemResolver, PayloadHandle

__all__ = ["ItemResolver", "PayloadHandle"]
