# Generator package: exposes the generation collaborator and its types.

from .generator import ChatGenerator, build_chat_generator
from .types import Message, ModelParams
from .clients.echo_dev_client import EchoDevClient

__all__ = ["ChatGenerator", "build_chat_generator", "Message", "ModelParams", "EchoDevClient"]
