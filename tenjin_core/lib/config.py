"""
Runtime defaults for migration generation.
"""

import os
from dataclasses import dataclass

DEFAULT_MIGRATIONS_DIR = os.path.join("supabase", "migrations")
DEFAULT_DESCRIPTION = "Tenjin schema migration"
DEFAULT_TOOL_NAME = "Tenjin Framework"


@dataclass
class Settings:
    """
    Defaults used by the CLI and API when generating migrations.

    Attributes:
        migrations_dir: Directory new migration files are written to
        description: Description placed in the migration header
        tool_name: Generator name placed in the migration header
    """
    migrations_dir: str = DEFAULT_MIGRATIONS_DIR
    description: str = DEFAULT_DESCRIPTION
    tool_name: str = DEFAULT_TOOL_NAME

    @classmethod
    def from_env(cls) -> 'Settings':
        """Build settings, letting TENJIN_* environment variables override defaults."""
        return cls(
            migrations_dir=os.environ.get("TENJIN_MIGRATIONS_DIR", DEFAULT_MIGRATIONS_DIR),
            description=os.environ.get("TENJIN_DESCRIPTION", DEFAULT_DESCRIPTION),
            tool_name=os.environ.get("TENJIN_TOOL_NAME", DEFAULT_TOOL_NAME),
        )
