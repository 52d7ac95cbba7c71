"""Access to the chat transcript storage owned by the desktop app."""

from mata.storage.chat_storage import ChatStorage, SqliteChatStorage, rebuild_index

__all__ = ["ChatStorage", "SqliteChatStorage", "rebuild_index"]
