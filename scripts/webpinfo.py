#!/usr/bin/env python3
'''
Dump the metadata of WebP images.

 $ webpinfo.py [--verify] <webp file path>...

With --verify the dimensions decoded from the chunks are compared with the
ones Pillow reports.
'''
import logging
import sys
import os

from PIL import Image

from riffmeta.directory import DirectoryKind, WebPTag
from riffmeta.images.webp import read_metadata


logging.basicConfig(level=logging.DEBUG if 'DEBUG' in os.environ else logging.INFO)
logger = logging.getLogger(__name__)


def usage(progname):
    print(f'usage: {progname} [--verify] <webp file path>...')
    sys.exit(1)


def dump(metadata):
    for idx, directory in enumerate(metadata):
        print(f'[{idx:02d}] {directory.name}')
        for tag, _ in directory.items():
            print(f'     {directory.tag_name(tag):<30} {directory.description(tag)}')
        for name, value in directory.properties.items():
            print(f'     {name:<30} {value}')
        for error in directory.errors:
            print(f'     ERROR: {error}')


def verify(filepath, metadata):
    '''Returns True if the first WebP directory agrees with Pillow'''
    directory = metadata.get_first(DirectoryKind.WEBP)
    if directory is None or directory.has_error:
        logger.error(f'no dimensions decoded for \'{filepath}\'')
        return False

    decoded = (directory.get(WebPTag.IMAGE_WIDTH), directory.get(WebPTag.IMAGE_HEIGHT))

    with Image.open(filepath) as image:
        expected = image.size

    if decoded != expected:
        logger.error(f'\'{filepath}\': decoded {decoded[0]}x{decoded[1]} but Pillow says {expected[0]}x{expected[1]}')
        return False

    return True


if __name__ == '__main__':
    args = sys.argv[1:]

    do_verify = '--verify' in args
    paths = [_ for _ in args if _ != '--verify']

    if not paths:
        usage(sys.argv[0])

    failed = False
    for filepath in paths:
        print(f'{filepath}:')
        metadata = read_metadata(filepath)
        dump(metadata)

        if do_verify and not verify(filepath, metadata):
            failed = True

    sys.exit(1 if failed else 0)
