from .ids import ID_LENGTH, generate_short_id, is_short_id

__all__ = ["ID_LENGTH", "generate_short_id", "is_short_id"]
