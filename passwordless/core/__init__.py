# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Core orchestration: configuration, the Passwordless orchestrator and
post-verification actions.
"""

from .config import Config
from .actions import PostVerifyAction, DeleteOnSuccess, DeleteAlways, CallbackAction
from .passwordless import Passwordless, request_token, verify_token

__all__ = [
    "Config",
    "PostVerifyAction",
    "DeleteOnSuccess",
    "DeleteAlways",
    "CallbackAction",
    "Passwordless",
    "request_token",
    "verify_token",
]
