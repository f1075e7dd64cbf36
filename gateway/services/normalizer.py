"""
MESSAGE NORMALIZER
==================

Turns a ChatRequest plus prior turns into the provider-neutral message list
that every adapter starts from: history first, in order, then the new user
message. A request with an image gets multimodal content (text part, then
image part); otherwise the user content is the plain string.

The request is assumed valid; the dispatcher checks it before calling here.
"""

from typing import List, Sequence, Union

from gateway.models import ChatRequest, HistoryItem, ImagePart, Message, TextPart, Turn


def build_user_content(request: ChatRequest):
    """Plain string, or [text, image] parts when the request carries an image URL."""
    if request.image_url:
        return [
            TextPart(text=request.message),
            ImagePart(url=request.image_url, detail="high"),
        ]
    return request.message


def normalize(request: ChatRequest, prior_history: Sequence[Union[Turn, HistoryItem]] = ()) -> List[Message]:
    """
    Build the ordered message list for one request.

    Explicit history on the request wins over prior_history; the two are never
    combined. Stored and explicit turns are passed through verbatim.
    """
    source = request.history if request.history is not None else prior_history
    messages = [Message(role=item.role, content=item.content) for item in source]
    messages.append(Message(role="user", content=build_user_content(request)))
    return messages
