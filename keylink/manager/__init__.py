from .link_manager import Delete, LinkManager, Upsert

__all__ = ["Delete", "LinkManager", "Upsert"]
