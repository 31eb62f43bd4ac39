"""Data model modules (see ``allms.base.models`` for the public surface)."""
