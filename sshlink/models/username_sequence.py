from sqlalchemy import Table, MetaData, Column, Integer, String

# One counter row per username prefix (SQLAlchemy Core, no ORM class)
metadata = MetaData()

username_sequences = Table(
    "username_sequences",
    metadata,
    Column("prefix", String(32), primary_key=True),
    Column("last_value", Integer, nullable=False, default=0),
)

def create_tables(engine):
    """Create the username_sequences table in the target database."""
    metadata.create_all(engine)


__all__ = ["username_sequences", "metadata", "create_tables"]
