"""Runtime helpers for the treasury multisig validator"""

from .address import AccountId, source_public_key
from .errors import *
from .errors import __all__ as _errors_all

__all__ = [
    "AccountId",
    "source_public_key",
] + list(_errors_all)
