import io
import logging

from .exceptions import UnpackException


logger = logging.getLogger(__name__)


class Stream(object):
    '''This is a simple wrapper around path/bytes/file objects to
    uniform their properties: the RIFF walker and the chunks only need
    read(), tell(), seek() and skip().

    It can be used as a context manager: the underlying object is closed only
    if the stream opened it.'''
    def __init__(self, obj):
        '''Here we normalize the object in order to be accessed as a normal file object'''
        self._type = type(obj)
        self._owned = False
        self.obj = obj

        init_method_name = 'init_%s' % self.obj.__class__.__name__

        init_method = getattr(self, init_method_name, self.init_fileobj)

        init_method()

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, self._type.__name__)

    def __getattr__(self, name):
        return getattr(self.obj, name)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def close(self):
        if self._owned:
            self.obj.close()

    def init_str(self):
        '''We think this is a path'''
        logger.debug('opening path \'%s\'' % self.obj)
        self.obj = open(self.obj, 'rb')
        self._owned = True

    def init_PosixPath(self):
        self.obj = str(self.obj)
        self.init_str()

    init_WindowsPath = init_PosixPath

    def init_bytes(self):
        '''We think these are raw bytes'''
        self.obj = io.BytesIO(self.obj)
        self._owned = True

    def init_bytearray(self):
        self.obj = bytes(self.obj)
        self.init_bytes()

    init_memoryview = init_bytearray

    def init_fileobj(self):
        '''Anything else must already quack like a binary file'''
        if not hasattr(self.obj, 'read'):
            raise ValueError('\'%s\' is the wrong kind of object to use as stream' % self._type.__name__)

    def seek(self, offset):
        if not isinstance(offset, int):
            raise ValueError('\'%s\' is the wrong kind of offset to use' % offset.__class__.__name__)

        self.obj.seek(offset)

    def read_exactly(self, n):
        '''Read n bytes or fail: a short read means the data is truncated.'''
        data = self.obj.read(n)
        if len(data) != n:
            raise UnpackException(
                'expected %d bytes at offset %d, got %d' % (n, self.obj.tell() - len(data), len(data)))

        return data

    def skip(self, n):
        self.obj.seek(n, io.SEEK_CUR)
