from .datasets import as_frame, load_table

__all__ = ["as_frame", "load_table"]
