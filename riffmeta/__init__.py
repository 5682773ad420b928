"""
# riffmeta: metadata of RIFF based images.

The extraction is organized in layers

 1. a declarative description of the fixed binary structures (core.Chunk and
    the fields in fields), read-only: you only unpack() them from a stream

 2. a walker of the RIFF container (containers.riff.RiffReader) that calls
    back a handler for every chunk

 3. the handler of the specific format (images.webp.WebPRiffHandler) that
    decodes the chunks it knows and delegates the embedded blocks (Exif, ICC,
    XMP) to the decoders in formats

The output is a Metadata instance, an ordered sequence of Directory: the
errors met are reported as data inside it, nothing is raised to the caller
unless a strict Compliant level is requested.

    from riffmeta.images.webp import read_metadata

    for directory in read_metadata('image.webp'):
        for tag, value in directory.items():
            print(directory.name, directory.tag_name(tag), directory.description(tag))
"""
