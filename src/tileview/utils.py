"""Small helpers shared by the command line tools."""

VERBOSE = False


def vprint(text, level=0):
    """Print text if verbose mode is enabled.

    Parameters
    ----------
    text : str
        Text to print.
    level : int, optional
        Indentation level of the message, by default 0.
    """
    if VERBOSE:
        print("  " * level + str(text))


def set_verbose(verbose=True):
    global VERBOSE
    VERBOSE = bool(verbose)
