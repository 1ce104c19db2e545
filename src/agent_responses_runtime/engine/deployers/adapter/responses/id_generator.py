# -*- coding: utf-8 -*-
"""
Identifier generation for the Responses API

Every identifier has the shape ``{category}_{entropy}{partition}``. The
partition fragment is shared by all identifiers created for one
response so that downstream stores can shard on it.
"""
import secrets
import string
from abc import ABC, abstractmethod
from typing import Optional

from ....schemas.exception import MalformedIdentifierError

ALPHANUMERIC = string.ascii_letters + string.digits

DEFAULT_ENTROPY_LENGTH = 32
DEFAULT_PARTITION_KEY_LENGTH = 16


def secure_entropy(length: int) -> str:
    if length < 0:
        raise ValueError("length must be non-negative")
    return "".join(secrets.choice(ALPHANUMERIC) for _ in range(length))


def new_id(
    prefix: str,
    entropy_length: int = DEFAULT_ENTROPY_LENGTH,
    partition_key: Optional[str] = None,
    partition_key_length: int = DEFAULT_PARTITION_KEY_LENGTH,
) -> str:
    """
    Build a fresh identifier.

    Args:
        prefix: category tag placed before the underscore
        entropy_length: number of random characters
        partition_key: partition fragment to reuse; a new one is drawn
            when omitted
        partition_key_length: length of a freshly drawn partition key

    Returns:
        str: ``{prefix}_{entropy}{partition_key}``
    """
    entropy = secure_entropy(entropy_length)
    if partition_key is None:
        partition_key = secure_entropy(partition_key_length)
    return f"{prefix}_{entropy}{partition_key}"


def extract_partition_id(
    identifier: str,
    entropy_length: int = DEFAULT_ENTROPY_LENGTH,
    partition_key_length: int = DEFAULT_PARTITION_KEY_LENGTH,
) -> str:
    """
    Return the partition fragment embedded in ``identifier``.

    Raises:
        MalformedIdentifierError: the identifier has no ``_`` separated
            body long enough to hold entropy and partition key
    """
    if not identifier:
        raise MalformedIdentifierError(identifier)
    parts = [part for part in identifier.split("_") if part]
    if len(parts) < 2:
        raise MalformedIdentifierError(identifier)
    body = parts[1]
    if len(body) < entropy_length + partition_key_length:
        raise MalformedIdentifierError(identifier)
    return body[-partition_key_length:]


class IdGenerator(ABC):
    """Produces identifiers for the items of one response"""

    @abstractmethod
    def generate(self, category: Optional[str] = None) -> str:
        pass

    def function_call_id(self) -> str:
        return self.generate("func")

    def function_output_id(self) -> str:
        return self.generate("funcout")

    def message_id(self) -> str:
        return self.generate("msg")

    def reasoning_id(self) -> str:
        return self.generate("rs")


class DefaultIdGenerator(IdGenerator):
    def __init__(
        self,
        response_id: Optional[str] = None,
        conversation_id: Optional[str] = None,
        entropy_length: int = DEFAULT_ENTROPY_LENGTH,
        partition_key_length: int = DEFAULT_PARTITION_KEY_LENGTH,
    ):
        self.entropy_length = entropy_length
        self.partition_key_length = partition_key_length
        self.response_id = response_id or new_id(
            "resp",
            entropy_length=entropy_length,
            partition_key_length=partition_key_length,
        )
        self.conversation_id = conversation_id or new_id(
            "conv",
            entropy_length=entropy_length,
            partition_key_length=partition_key_length,
        )
        self.partition_id = extract_partition_id(
            self.conversation_id,
            entropy_length=entropy_length,
            partition_key_length=partition_key_length,
        )

    @classmethod
    def from_request(
        cls,
        request,
        entropy_length: int = DEFAULT_ENTROPY_LENGTH,
        partition_key_length: int = DEFAULT_PARTITION_KEY_LENGTH,
    ) -> "DefaultIdGenerator":
        """
        Build a generator for a ``CreateResponse`` request.

        The response id comes from ``metadata["response_id"]`` and the
        conversation id from ``conversation.id`` when they are supplied.
        """
        response_id = None
        if request.metadata:
            response_id = request.metadata.get("response_id")
        conversation_id = None
        if request.conversation is not None:
            conversation_id = request.conversation.id
        return cls(
            response_id=response_id,
            conversation_id=conversation_id,
            entropy_length=entropy_length,
            partition_key_length=partition_key_length,
        )

    def generate(self, category: Optional[str] = None) -> str:
        prefix = category or "id"
        return new_id(
            prefix,
            entropy_length=self.entropy_length,
            partition_key=self.partition_id,
        )
