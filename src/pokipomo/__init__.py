"""PokiPomo - focus timer core with urge-surf support and progress tracking."""

__version__ = "0.1.0"
