from sqlalchemy import inspect

from sshlink.core.config import get_settings
from sshlink.core.database import make_engine
from sshlink.models.username_sequence import create_tables


def main(database_url: str = None) -> list:
    """Create the username counter table and return the tables now present."""
    url = database_url or get_settings().database_url
    engine = make_engine(url)
    try:
        create_tables(engine)
        tables = inspect(engine).get_table_names()
    finally:
        engine.dispose()

    print(f"✓ Counter tables ready in `{url}`")
    for name in tables:
        print(f"  → {name}")
    return tables


if __name__ == '__main__':
    main()
