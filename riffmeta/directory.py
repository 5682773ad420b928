'''
# Metadata directories

The output of the extraction is a sequence of directories: each one maps small
integer tags to values (int, bool, str, bytes, ...) and carries a list of
errors. There is a single directory type, the kind of metadata it holds is
given by DirectoryKind.

A directory coming out of a decoder is either clean (only tags) or errored
(only errors): the decoders never mix them for the same attempt.
'''
import datetime
import os
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

from PIL import ExifTags


class DirectoryKind(Enum):
    WEBP           = 'WebP'
    EXIF_IFD0      = 'Exif IFD0'
    EXIF_SUBIFD    = 'Exif SubIFD'
    EXIF_INTEROP   = 'Interoperability'
    EXIF_THUMBNAIL = 'Exif Thumbnail'
    GPS            = 'GPS'
    ICC            = 'ICC Profile'
    XMP            = 'XMP'
    FILE           = 'File'
    ERROR          = 'Error'

    @property
    def is_exif(self):
        return self in (
            DirectoryKind.EXIF_IFD0,
            DirectoryKind.EXIF_SUBIFD,
            DirectoryKind.EXIF_INTEROP,
            DirectoryKind.EXIF_THUMBNAIL,
            DirectoryKind.GPS,
        )


class WebPTag:
    IMAGE_HEIGHT = 1
    IMAGE_WIDTH  = 2
    HAS_ALPHA    = 3
    IS_ANIMATION = 4


class FileTag:
    FILE_NAME          = 1
    FILE_SIZE          = 2
    FILE_MODIFIED_DATE = 3


class IccTag:
    '''The tags of the header are the offsets of the values inside it;
    the tags of the tag table are their four-character signatures as integers.'''
    PROFILE_BYTE_COUNT      = 0
    CMM_TYPE                = 4
    PROFILE_VERSION         = 8
    PROFILE_CLASS           = 12
    COLOR_SPACE             = 16
    PROFILE_CONNECTION_SPACE = 20
    PROFILE_DATETIME        = 24
    SIGNATURE               = 36
    PLATFORM                = 40
    CMM_FLAGS               = 44
    DEVICE_MAKE             = 48
    DEVICE_MODEL            = 52
    DEVICE_ATTR             = 56
    RENDERING_INTENT        = 64
    XYZ_VALUES              = 68
    PROFILE_CREATOR         = 80
    TAG_COUNT               = 128
    DESCRIPTION             = 0x64657363  # desc
    COPYRIGHT               = 0x63707274  # cprt
    DEVICE_MFG_DESCRIPTION  = 0x646d6e64  # dmnd
    DEVICE_MODEL_DESCRIPTION = 0x646d6464  # dmdd


class XmpTag:
    XMP_VALUE_COUNT = 0xFFFF
    XMP_RAW         = 0xFFFE


_TAG_NAMES: Dict[DirectoryKind, Dict[int, str]] = {
    DirectoryKind.WEBP: {
        WebPTag.IMAGE_HEIGHT: 'Image Height',
        WebPTag.IMAGE_WIDTH: 'Image Width',
        WebPTag.HAS_ALPHA: 'Has Alpha',
        WebPTag.IS_ANIMATION: 'Is Animation',
    },
    DirectoryKind.FILE: {
        FileTag.FILE_NAME: 'File Name',
        FileTag.FILE_SIZE: 'File Size',
        FileTag.FILE_MODIFIED_DATE: 'File Modified Date',
    },
    DirectoryKind.ICC: {
        IccTag.PROFILE_BYTE_COUNT: 'Profile Size',
        IccTag.CMM_TYPE: 'CMM Type',
        IccTag.PROFILE_VERSION: 'Version',
        IccTag.PROFILE_CLASS: 'Class',
        IccTag.COLOR_SPACE: 'Color space',
        IccTag.PROFILE_CONNECTION_SPACE: 'Profile Connection Space',
        IccTag.PROFILE_DATETIME: 'Profile Date/Time',
        IccTag.SIGNATURE: 'Signature',
        IccTag.PLATFORM: 'Primary Platform',
        IccTag.CMM_FLAGS: 'CMM Flags',
        IccTag.DEVICE_MAKE: 'Device manufacturer',
        IccTag.DEVICE_MODEL: 'Device model',
        IccTag.DEVICE_ATTR: 'Device attributes',
        IccTag.RENDERING_INTENT: 'Rendering Intent',
        IccTag.XYZ_VALUES: 'XYZ values',
        IccTag.PROFILE_CREATOR: 'Profile Creator',
        IccTag.TAG_COUNT: 'Tag Count',
        IccTag.DESCRIPTION: 'Profile Description',
        IccTag.COPYRIGHT: 'Profile Copyright',
        IccTag.DEVICE_MFG_DESCRIPTION: 'Device Mfg Description',
        IccTag.DEVICE_MODEL_DESCRIPTION: 'Device Model Description',
    },
    DirectoryKind.XMP: {
        XmpTag.XMP_VALUE_COUNT: 'XMP Value Count',
        XmpTag.XMP_RAW: 'XMP Packet',
    },
}


def _tag_names(kind: DirectoryKind) -> Dict[int, str]:
    if kind is DirectoryKind.GPS:
        return ExifTags.GPSTAGS
    if kind.is_exif:
        return ExifTags.TAGS

    return _TAG_NAMES.get(kind, {})


class Directory(object):
    '''A named mapping from tags to values plus the errors met while decoding.'''

    def __init__(self, kind: DirectoryKind):
        self.kind = kind
        self._tags: Dict[int, object] = {}
        self._errors: List[str] = []
        # named values that don't fit an integer tag (XMP properties)
        self.properties: Dict[str, object] = {}

    @classmethod
    def error(cls, message: str, kind: DirectoryKind = DirectoryKind.ERROR) -> 'Directory':
        directory = cls(kind)
        directory.add_error(message)
        return directory

    @property
    def name(self) -> str:
        return self.kind.value

    def __repr__(self):
        if self._errors:
            return '<%s(%s, errors=%r)>' % (self.__class__.__name__, self.name, self._errors)

        return '<%s(%s, %d tags)>' % (self.__class__.__name__, self.name, len(self._tags))

    def __contains__(self, tag: int) -> bool:
        return tag in self._tags

    def __len__(self):
        return len(self._tags)

    def __eq__(self, other):
        if not isinstance(other, Directory):
            return NotImplemented

        return (self.kind, self._tags, self._errors, self.properties) == \
            (other.kind, other._tags, other._errors, other.properties)

    def set(self, tag: int, value) -> None:
        if value is None:
            raise ValueError(f'cannot set tag {tag:#x} of {self.name} to None')

        self._tags[tag] = value

    def get(self, tag: int, default=None):
        return self._tags.get(tag, default)

    def items(self) -> Iterator[Tuple[int, object]]:
        return iter(self._tags.items())

    def add_error(self, message: str) -> None:
        self._errors.append(message)

    @property
    def errors(self) -> List[str]:
        return list(self._errors)

    @property
    def has_error(self) -> bool:
        return len(self._errors) > 0

    @property
    def is_empty(self) -> bool:
        return not self._tags and not self._errors and not self.properties

    def tag_name(self, tag: int) -> str:
        name = _tag_names(self.kind).get(tag)
        if name is None:
            return 'Unknown tag (0x%04x)' % tag

        return name

    def description(self, tag: int) -> Optional[str]:
        '''Human readable representation of the value of a tag'''
        if tag not in self._tags:
            return None

        value = self._tags[tag]

        if isinstance(value, bool):
            return 'true' if value else 'false'
        if isinstance(value, (bytes, bytearray)):
            return '[%d bytes]' % len(value)
        if isinstance(value, datetime.datetime):
            return value.strftime('%Y:%m:%d %H:%M:%S')
        # named tuples (rationals) have their own representation
        if isinstance(value, (tuple, list)) and not hasattr(value, '_fields'):
            return ' '.join(str(_) for _ in value)

        return str(value)


class Metadata(object):
    '''Ordered, append-only collection of directories owned by the caller
    that processes a whole file.'''

    def __init__(self):
        self._directories: List[Directory] = []

    def __repr__(self):
        return '<%s(%r)>' % (self.__class__.__name__, self._directories)

    def __iter__(self):
        return iter(self._directories)

    def __len__(self):
        return len(self._directories)

    def __getitem__(self, index) -> Directory:
        return self._directories[index]

    def append(self, directory: Directory) -> None:
        self._directories.append(directory)

    def extend(self, directories) -> None:
        for directory in directories:
            self.append(directory)

    def of_kind(self, kind: DirectoryKind) -> List[Directory]:
        return [_ for _ in self._directories if _.kind is kind]

    def get_first(self, kind: DirectoryKind) -> Optional[Directory]:
        directories = self.of_kind(kind)
        return directories[0] if directories else None

    @property
    def has_errors(self) -> bool:
        return any(_.has_error for _ in self._directories)


def file_directory(path) -> Directory:
    '''Name, size and modification time of the file at path'''
    stat = os.stat(path)

    directory = Directory(DirectoryKind.FILE)
    directory.set(FileTag.FILE_NAME, os.path.basename(os.fspath(path)))
    directory.set(FileTag.FILE_SIZE, stat.st_size)
    directory.set(FileTag.FILE_MODIFIED_DATE, datetime.datetime.fromtimestamp(stat.st_mtime))

    return directory
