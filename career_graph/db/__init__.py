from career_graph.db.database import Base, Database, create_db_engine, get_database

__all__ = ["Base", "Database", "create_db_engine", "get_database"]
