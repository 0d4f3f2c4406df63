__version__ = "0.3.0"
__build_type__ = "source"
