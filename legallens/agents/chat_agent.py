import json
import logging
from typing import Any, List, Mapping, Optional, Sequence

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage

from legallens.core.errors import EmptyResponseError, ValidationError
from legallens.core.llm import GeminiChatModel
from legallens.core.prompts import CHAT_PROMPT
from legallens.schemas.analysis import ChatRole, ChatTurn

logger = logging.getLogger(__name__)

# Returned for empty replies as well as failed calls, so a failed turn always reads the same
CHAT_FALLBACK_MESSAGE = "I apologize, but I encountered an error responding to your request."


class ChatAgent:
    """Agent for follow-up questions about a finished analysis."""

    def __init__(self, llm: Optional[GeminiChatModel] = None):
        """Initialize the chat agent."""
        self.llm = llm or GeminiChatModel.for_chat()

    async def ask(
        self,
        history: Sequence[ChatTurn],
        question: str,
        context: Mapping[str, Any],
    ) -> str:
        """Answer a follow-up question.

        Args:
            history: Prior turns, not including ``question``
            question: The new user question
            context: Condensed analysis context (see ``ContractAnalysis.chat_context``)

        Returns:
            The model's answer, or ``CHAT_FALLBACK_MESSAGE`` if the call fails
        """
        if not question or not question.strip():
            raise ValidationError("Question must not be empty")

        messages = self.build_messages(history, question, context)
        try:
            reply = await self.llm.ainvoke(messages)
            text = (reply.content or "").strip() if isinstance(reply.content, str) else ""
            if not text:
                raise EmptyResponseError("Assistant returned no content")
            return text
        except Exception as e:
            logger.error(f"Error answering follow-up question: {str(e)}")
            return CHAT_FALLBACK_MESSAGE

    @staticmethod
    def build_messages(
        history: Sequence[ChatTurn],
        question: str,
        context: Mapping[str, Any],
    ) -> List[BaseMessage]:
        """System instruction with the serialized context, prior turns, then the question."""
        turns = [
            AIMessage(content=turn.text) if turn.role == ChatRole.MODEL else HumanMessage(content=turn.text)
            for turn in history
        ]
        return CHAT_PROMPT.format_messages(
            context=json.dumps(dict(context), ensure_ascii=False),
            history=turns,
            question=question,
        )
