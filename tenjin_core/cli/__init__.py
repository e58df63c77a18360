from tenjin_core.cli.cli import main

__all__ = ["main"]
