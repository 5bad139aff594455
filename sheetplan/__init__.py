# Sheet plan polygon export engine

__version__ = "1.0.0"
