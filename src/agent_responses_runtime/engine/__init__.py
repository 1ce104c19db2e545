# -*- coding: utf-8 -*-
from .agents.base_agent import Agent
from .app import create_app

__all__ = ["Agent", "create_app"]
