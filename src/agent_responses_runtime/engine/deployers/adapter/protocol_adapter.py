# -*- coding: utf-8 -*-
from abc import ABC, abstractmethod
from typing import Any


class ProtocolAdapter(ABC):
    def __init__(self, **kwargs):
        self._kwargs = kwargs

    @abstractmethod
    def add_endpoint(self, app, agent, **kwargs) -> Any:
        """
        Expose ``agent`` on ``app`` through this protocol.

        Args:
            app: the web application to register routes on
            agent: the agent served by the endpoint
            **kwargs: protocol specific endpoint options

        Returns:
            Any: implementation-dependent
        """
