class SecdError(Exception):
    """ Base class for all secdc errors"""
    pass

class SecdSyntaxError(SecdError):
    """ Raised when the reader fails or a special form is malformed"""
    pass

class SecdNameError(SecdError):
    """ Raised when a name is neither a local, a declared function nor a built-in"""

class SecdArityError(SecdError):
    """ Raised when the number of arguments passed to a built-in or function is incorrect"""

class SecdEntryError(SecdError):
    """ Raised when a program is linked without a defentry"""

class SecdLinkError(SecdError):
    """ Raised when the linker meets a reference with no table entry.

    This is an internal consistency error: correctly built tables never produce it.
    """
