from bitlings.database.db_manager import DBManager

__all__ = ["DBManager"]
