#!/usr/bin/env python
# Copyright 2024 The jenkins-pipeline-codec Authors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS, WITHOUT
# WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied. See the
# License for the specific language governing permissions and limitations
# under the License.

# Manage Jenkins XML config file input and output.

import logging
import xml.etree.ElementTree as XML

from jenkins_pipelines import errors

__all__ = [
    "XmlJob",
    "parse_config_xml",
    "replace_xml_version",
]

logger = logging.getLogger(__name__)

# Jenkins declares its job documents as XML 1.1, which expat refuses
JENKINS_XML_VERSION = '1.1'
PARSER_XML_VERSION = '1.0'


def replace_xml_version(config, old_version, new_version):
    """Rewrite the XML version on the first line of ``config`` only."""
    lines = config.split('\n')
    lines[0] = lines[0].replace(old_version, new_version)
    return '\n'.join(lines)


def remove_ignorable_whitespace(node):
    """Remove insignificant whitespace from XML nodes

    It should only remove whitespace in between elements and sub elements.
    This should be safe for Jenkins due to how it's XML serialization works
    but may not be valid for other XML documents. So use this method with
    caution outside of this specific library.
    """
    # strip tail whitespace if it's not significant
    if node.tail and node.tail.strip() == "":
        node.tail = None

    for child in node:
        # only strip whitespace from the text node if there are subelement
        # nodes as this means we are removing leading whitespace before such
        # sub elements. Otherwise risk removing whitespace from an element
        # that only contains whitespace
        if node.text and node.text.strip() == "":
            node.text = None
        remove_ignorable_whitespace(child)


def parse_config_xml(config):
    """Parse a Jenkins ``config.xml`` document and return its root element.

    :arg str config: the document, as returned by Jenkins
    :raises XmlFormatError: when the document is not well-formed
    """
    config = replace_xml_version(config.lstrip(), JENKINS_XML_VERSION,
                                 PARSER_XML_VERSION)
    try:
        root = XML.fromstring(config)
    except XML.ParseError as e:
        raise errors.XmlFormatError(
            "Malformed Jenkins config.xml: {0}".format(e))
    remove_ignorable_whitespace(root)
    return root


class XmlJob(object):
    def __init__(self, xml, indent=2):
        self.xml = xml
        self.indent = indent

    def output(self):
        XML.indent(self.xml, space=' ' * self.indent)
        out = XML.tostring(self.xml, encoding='UTF-8',
                           xml_declaration=True).decode('utf-8')
        # a literal carriage return in text would be normalised away by
        # the parser, attributes already carry it as a character reference
        out = out.replace('\r', '&#13;')
        return replace_xml_version(out, PARSER_XML_VERSION,
                                   JENKINS_XML_VERSION)
