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

import logging

import xml.etree.ElementTree as XML

from jenkins_pipelines.errors import InvalidAttributeError
from jenkins_pipelines.errors import MissingAttributeError
from jenkins_pipelines.models import GitCloneOption

logger = logging.getLogger(__name__)

CLONE_OPTION_TRAIT = 'jenkins.plugins.git.traits.CloneOptionTrait'
CLONE_OPTION_EXTENSION = 'hudson.plugins.git.extensions.impl.CloneOption'
REGEX_FILTER_TRAIT = 'jenkins.scm.impl.trait.RegexSCMHeadFilterTrait'

DEFAULT_CLONE_TIMEOUT = 10
DEFAULT_CLONE_DEPTH = 1

TRUE_STRINGS = ('1', 't', 'T', 'TRUE', 'true', 'True')


def select_child(node, tag):
    """Return the first direct child of ``node`` named ``tag``, or None.
    """
    if node is None:
        return None
    for child in node:
        if child.tag == tag:
            return child
    return None


def select_children(node, tag):
    if node is None:
        return []
    return [child for child in node if child.tag == tag]


def child_text(node, tag):
    child = select_child(node, tag)
    if child is None or child.text is None:
        return ''
    return child.text


def get_or_create_child(parent, tag, text=None):
    """Return the existing ``tag`` child of ``parent`` or append a new one.

    The child text is replaced when ``text`` is not None, sibling order is
    left untouched.
    """
    child = select_child(parent, tag)
    if child is None:
        child = XML.SubElement(parent, tag)
    if text is not None:
        child.text = text
    return child


def set_attribute(node, key, value):
    node.set(key, value)
    return node


def remove_child(parent, tag):
    """Remove every direct ``tag`` child of ``parent``; no-op when absent.
    """
    if parent is None:
        return parent
    for child in select_children(parent, tag):
        parent.remove(child)
    return parent


def bool_text(value):
    return str(bool(value)).lower()


def parse_bool(text):
    return (text or '').strip() in TRUE_STRINGS


def parse_int(text, default=0):
    try:
        return int((text or '').strip())
    except ValueError:
        return default


def convert_mapping_to_xml(parent, data, mapping, fail_required=True):
    """Convert mapping to XML

    ``data`` is a model instance, each mapping entry is a tuple of model
    field name, XML tag name, default value and an optional list of valid
    values.

    fail_required affects the last parameter of the mapping field when it's
    parameter is set to 'None'. When fail_required is True then a 'None' value
    represents a required configuration so will raise a MissingAttributeError
    if the model does not provide the configuration.

    If fail_required is False parameter is treated as optional. Logic will skip
    configuring the XML tag for the parameter.

    valid_options provides a way to check if the value of the model is from a
    list of available options. When the model holds a value that is not
    supported from the list, it raise an InvalidAttributeError.
    """
    for elem in mapping:
        (optname, xmlname, val) = elem[:3]
        if data is not None and getattr(data, optname, None) is not None:
            val = getattr(data, optname)

        valid_options = []
        if len(elem) == 4 and type(elem[3]) is list:
            valid_options = elem[3]

        # Use fail_required setting to allow support for optional parameters
        if val is None and fail_required is True:
            raise MissingAttributeError(optname)

        if val is None and fail_required is False:
            continue

        if valid_options:
            if val not in valid_options:
                raise InvalidAttributeError(optname, val, valid_options)

        if type(val) == bool:
            val = str(val).lower()

        XML.SubElement(parent, xmlname).text = str(val)


def convert_xml_to_mapping(parent, mapping):
    """Inverse of :func:`convert_mapping_to_xml`.

    Returns a dict of model field name to value read from the children of
    ``parent``. Missing elements take the mapping default; booleans and
    integers are converted according to the type of that default.
    """
    data = {}
    for elem in mapping:
        (optname, xmlname, default) = elem[:3]
        child = select_child(parent, xmlname)
        if child is None:
            data[optname] = default
            continue
        text = child.text or ''
        if type(default) == bool:
            data[optname] = parse_bool(text)
        elif type(default) == int:
            data[optname] = parse_int(text, default)
        else:
            data[optname] = text
    return data


def append_clone_option_trait(traits, clone_option):
    """Append a git CloneOptionTrait; negative timeout or depth values fall
    back to the plugin defaults.
    """
    if clone_option is None:
        return None

    timeout = clone_option.timeout
    if timeout is None or timeout < 0:
        timeout = DEFAULT_CLONE_TIMEOUT
    depth = clone_option.depth
    if depth is None or depth < 0:
        depth = DEFAULT_CLONE_DEPTH

    trait = XML.SubElement(traits, CLONE_OPTION_TRAIT)
    extension = XML.SubElement(trait, 'extension', {
        'class': CLONE_OPTION_EXTENSION,
    })
    mapping = [
        ('shallow', 'shallow', False),
        ('', 'noTags', False),
        ('', 'honorRefspec', True),
    ]
    convert_mapping_to_xml(extension, clone_option, mapping)
    XML.SubElement(extension, 'reference')
    XML.SubElement(extension, 'timeout').text = str(timeout)
    XML.SubElement(extension, 'depth').text = str(depth)
    return trait


def get_clone_option_from_traits(traits):
    extension = select_child(select_child(traits, CLONE_OPTION_TRAIT),
                             'extension')
    if extension is None:
        return None

    mapping = [
        ('shallow', 'shallow', False),
        ('timeout', 'timeout', DEFAULT_CLONE_TIMEOUT),
        ('depth', 'depth', DEFAULT_CLONE_DEPTH),
    ]
    return GitCloneOption(**convert_xml_to_mapping(extension, mapping))


def append_regex_filter_trait(traits, regex_filter):
    if not regex_filter:
        return None
    trait = XML.SubElement(traits, REGEX_FILTER_TRAIT, {'plugin': 'scm-api'})
    XML.SubElement(trait, 'regex').text = regex_filter
    return trait


def get_regex_filter_from_traits(traits):
    return child_text(select_child(traits, REGEX_FILTER_TRAIT), 'regex')
