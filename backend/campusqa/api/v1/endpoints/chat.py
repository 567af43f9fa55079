from fastapi import APIRouter, Depends
import logging

from campusqa.schemas.forum import ChatRequest, ChatResponse
from campusqa.services.chatbot_service import ChatbotService, get_chatbot_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=ChatResponse, response_model_exclude_none=True)
async def chat_endpoint(
    request: ChatRequest,
    chatbot: ChatbotService = Depends(get_chatbot_service)
):
    """
    Answer a campus question from approved knowledge.
    Returns the fallback message with matched=false when nothing relevant is known.
    """
    logger.info(f"Chat query received (length {len(request.message)})")
    result = await chatbot.answer(request.message)
    return ChatResponse(**result.to_dict())
