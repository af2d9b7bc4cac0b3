"""
MongoDB document models using Beanie ODM
"""

from typing import List, Type

from beanie import Document as BeanieDocument

from .message import ChatMessage, Reaction
from .user import User, UserRole


def get_document_models() -> List[Type[BeanieDocument]]:
    """Get all document models for Beanie initialization"""
    return [
        User,
        ChatMessage,
    ]


__all__ = [
    "ChatMessage",
    "Reaction",
    "User",
    "UserRole",
    "get_document_models",
]
