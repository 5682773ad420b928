from enum import Flag


class Compliant(Flag):
    '''How strictly the data must follow the format.

    With NONE every problem is logged and reported as an error directory and the
    extraction goes on; MAGIC turns a wrong magic (RIFF header, ICC signature)
    into a MagicException and ENUM does the same for a value missing from the
    enum of a field. INHERIT means that a field asks its father.
    '''
    NONE    = 0
    ENUM    = 1 << 0
    MAGIC   = 1 << 1
    INHERIT = 1 << 2
