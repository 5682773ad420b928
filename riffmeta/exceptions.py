class RiffmetaException(Exception):
    '''Base class to extend in order to throw exception in riffmeta.

    The keyword argument "chain" represents the chain of the layers (field names)
    that caused the exception, innermost first.
    '''

    def __init__(self, *args, chain=None):
        self.chain = chain if chain is not None else []
        super().__init__(*args)


class UnpackException(RiffmetaException):
    pass


class MagicException(RiffmetaException):
    pass


class ChunkUnpackException(RiffmetaException):

    def __str__(self):
        msg = 'failed to unpack \'%s\'' % '.'.join(reversed(self.chain))
        if self.args:
            msg += ': %s' % self.args[0]
        return msg


class ReadException(RiffmetaException):
    '''Raised by the ByteReader when a read would go outside the buffer.'''
    pass


class RiffProcessingException(RiffmetaException):
    '''The RIFF framing itself is broken (wrong magic, impossible sizes).'''
    pass
