"""Error taxonomy for the discount and cart core"""


class RanchError(Exception):
    """Base exception for Caterpillar Ranch errors"""
    pass


class ValidationError(RanchError):
    """Input rejected before any state was touched"""
    pass


class NotFoundError(RanchError):
    """Referenced cart line, product, game or session does not exist"""
    pass


class StorageScopeError(RanchError, TypeError):
    """A component was given a store with the wrong persistence scope"""
    pass


class ReplayBlockedError(RanchError):
    """A game was already started for this product in the current browsing session"""
    pass
