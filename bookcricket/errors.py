"""
Error types raised by the match core
"""


class BookCricketError(Exception):
    """Base class for all match core errors"""


class InvalidConfiguration(BookCricketError):
    """Bad overs or player names supplied when starting a match"""


class InvalidStateTransition(BookCricketError):
    """Delivery requested or committed out of sequence"""
