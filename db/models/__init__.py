from db.models.chat_turn import ChatRole, ChatTurn

__all__ = ["ChatRole", "ChatTurn"]
