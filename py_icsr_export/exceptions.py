# -*- coding: utf-8 -*-
"""
This module defines custom exceptions for the py-icsr-export application.
"""


class EmptyCaseError(ValueError):
    """
    Raised when a case without any reactions is handed to the encoder.
    """

    pass


class IcsrReadError(Exception):
    """
    Raised when an exported ICSR document cannot be parsed back.
    """

    pass
