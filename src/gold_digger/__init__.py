"""gold-digger: run one MySQL/MariaDB query and export the result set."""

from gold_digger.__about__ import __version__

__all__ = ["__version__"]
