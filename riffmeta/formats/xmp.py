'''
# Extensible Metadata Platform

An XMP packet is RDF/XML, usually wrapped in <?xpacket?> processing
instructions; the properties live in the rdf:Description elements either as
attributes or as child elements, whose value can be a container (rdf:Seq,
rdf:Bag, rdf:Alt) of rdf:li items.
'''
import io
import logging
from typing import Dict, List
from xml.etree import ElementTree

from ..directory import Directory, DirectoryKind, XmpTag


RDF_NS = 'http://www.w3.org/1999/02/22-rdf-syntax-ns#'
RDF_DESCRIPTION = '{%s}Description' % RDF_NS
RDF_LI = '{%s}li' % RDF_NS
RDF_CONTAINERS = tuple('{%s}%s' % (RDF_NS, _) for _ in ('Seq', 'Bag', 'Alt'))
RDF_ATTRIBUTES = tuple('{%s}%s' % (RDF_NS, _) for _ in ('about', 'ID', 'nodeID', 'parseType'))


class XmpReader(object):
    '''Decodes an XMP packet into a single directory.

    The properties are stored as "prefix:Name" keys of Directory.properties;
    the tags hold the number of properties and the packet itself.
    '''

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def extract(self, payload: bytes, start_offset: int = 0) -> List[Directory]:
        packet = bytes(payload[start_offset:]).strip(b'\x00 \t\r\n')

        try:
            prefixes = self.namespace_prefixes(packet)
            root = ElementTree.fromstring(packet)
        except (ElementTree.ParseError, LookupError, ValueError) as e:
            # unknown or mismatching encodings fail before the XML is parsed
            return [Directory.error(f'Error processing XMP data: {e}', DirectoryKind.XMP)]

        directory = Directory(DirectoryKind.XMP)

        for description in root.iter(RDF_DESCRIPTION):
            for name, value in description.attrib.items():
                if name in RDF_ATTRIBUTES:
                    continue
                directory.properties[self.qualified_name(name, prefixes)] = value

            for child in description:
                value = self.element_value(child)
                if value is not None:
                    directory.properties[self.qualified_name(child.tag, prefixes)] = value

        directory.set(XmpTag.XMP_VALUE_COUNT, len(directory.properties))
        directory.set(XmpTag.XMP_RAW, packet.decode('utf-8', errors='replace'))

        self.logger.debug('found %d XMP properties' % len(directory.properties))

        return [directory]

    @staticmethod
    def namespace_prefixes(packet: bytes) -> Dict[str, str]:
        '''Map each namespace URI to the prefix declared for it'''
        prefixes = {}
        for _, (prefix, uri) in ElementTree.iterparse(io.BytesIO(packet), events=('start-ns',)):
            prefixes.setdefault(uri, prefix)

        return prefixes

    @staticmethod
    def qualified_name(name: str, prefixes: Dict[str, str]) -> str:
        if not name.startswith('{'):
            return name

        uri, local = name[1:].split('}', 1)
        prefix = prefixes.get(uri)

        return '%s:%s' % (prefix, local) if prefix else local

    def element_value(self, element):
        '''Text for simple properties, a tuple for arrays (first item for rdf:Alt)'''
        containers = [_ for _ in element if _.tag in RDF_CONTAINERS]
        if containers:
            container = containers[0]
            items = tuple((_.text or '').strip() for _ in container.iter(RDF_LI))
            if container.tag.endswith('}Alt'):
                return items[0] if items else None
            return items

        if len(element) > 0:
            # structures are not flattened
            return None

        return (element.text or '').strip()
