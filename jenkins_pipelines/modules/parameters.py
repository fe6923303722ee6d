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


"""
The Parameters module encodes the build parameters of a pipeline into a
``hudson.model.ParametersDefinitionProperty`` and reads them back.

Supported parameter types and the Jenkins classes they map to:

============  =========================================
type          class
============  =========================================
string        hudson.model.StringParameterDefinition
boolean       hudson.model.BooleanParameterDefinition
text          hudson.model.TextParameterDefinition
file          hudson.model.FileParameterDefinition
password      hudson.model.PasswordParameterDefinition
choice        hudson.model.ChoiceParameterDefinition
============  =========================================

Any other type is written as-is as the element name, so parameters of
classes this module does not know about survive a round trip.
"""

import logging
import xml.etree.ElementTree as XML

from jenkins_pipelines.errors import MissingAttributeError
import jenkins_pipelines.modules.helpers as helpers
from jenkins_pipelines.models import ParameterDefinition

logger = logging.getLogger(__name__)

PARAMETERS_PROPERTY = 'hudson.model.ParametersDefinitionProperty'
PARAMETER_DEFINITIONS = 'parameterDefinitions'

PARAMETER_TYPES = {
    'hudson.model.StringParameterDefinition': 'string',
    'hudson.model.BooleanParameterDefinition': 'boolean',
    'hudson.model.TextParameterDefinition': 'text',
    'hudson.model.FileParameterDefinition': 'file',
    'hudson.model.PasswordParameterDefinition': 'password',
    'hudson.model.ChoiceParameterDefinition': 'choice',
}

PARAMETER_CLASSES = dict(
    (ptype, pclass) for pclass, ptype in PARAMETER_TYPES.items())


def parameter_type(class_name):
    return PARAMETER_TYPES.get(class_name, class_name)


def parameter_class(ptype):
    return PARAMETER_CLASSES.get(ptype, ptype)


def base_param(xml_parent, param):
    pdef = XML.SubElement(xml_parent, parameter_class(param.type))
    XML.SubElement(pdef, 'name').text = param.name
    XML.SubElement(pdef, 'description').text = param.description
    return pdef


def choice_param(xml_parent, param):
    pdef = base_param(xml_parent, param)
    choices = XML.SubElement(pdef, 'choices',
                             {'class': 'java.util.Arrays$ArrayList'})
    a = XML.SubElement(choices, 'a', {'class': 'string-array'})
    for choice in param.default_value.split('\n'):
        XML.SubElement(a, 'string').text = choice
    return pdef


def file_param(xml_parent, param):
    return base_param(xml_parent, param)


def default_param(xml_parent, param):
    pdef = base_param(xml_parent, param)
    XML.SubElement(pdef, 'defaultValue').text = param.default_value
    return pdef


PARAMETER_WRITERS = {
    'choice': choice_param,
    'file': file_param,
}


def replace_parameters(properties, parameters):
    """Replace the parameter definitions held by ``properties``.

    :arg Element properties: the job ``properties`` element
    :arg list parameters: :class:`ParameterDefinition` items, written in
        order
    """
    prop = helpers.get_or_create_child(properties, PARAMETERS_PROPERTY)
    helpers.remove_child(prop, PARAMETER_DEFINITIONS)
    definitions = XML.SubElement(prop, PARAMETER_DEFINITIONS)

    for param in parameters:
        if not param.type:
            raise MissingAttributeError('type')
        if param.type not in PARAMETER_CLASSES:
            logger.debug("Passing through parameter {0} of unknown type "
                         "{1}".format(param.name, param.type))
        writer = PARAMETER_WRITERS.get(param.type, default_param)
        writer(definitions, param)
    return prop


def get_choices(pdef):
    # the strings are wrapped in a string-array in single pipelines, and
    # listed bare in multibranch ones
    choices = helpers.select_child(pdef, 'choices')
    anchor = helpers.select_child(choices, 'a')
    if anchor is None:
        strings = helpers.select_children(choices, 'string')
    else:
        strings = helpers.select_children(anchor, 'string')
    return '\n'.join(string.text or '' for string in strings)


def get_parameters(properties):
    """Read the parameter definitions held by ``properties``.

    Returns a tuple of :class:`ParameterDefinition` in document order, empty
    when the job has no parameters.
    """
    prop = helpers.select_child(properties, PARAMETERS_PROPERTY)
    definitions = helpers.select_child(prop, PARAMETER_DEFINITIONS)
    if definitions is None:
        return ()

    parameters = []
    for pdef in definitions:
        ptype = parameter_type(pdef.tag)
        if ptype == 'choice':
            default = get_choices(pdef)
        elif ptype == 'file':
            default = ''
        else:
            default = helpers.child_text(pdef, 'defaultValue')
        parameters.append(ParameterDefinition(
            name=helpers.child_text(pdef, 'name'),
            default_value=default,
            type=ptype,
            description=helpers.child_text(pdef, 'description'),
        ))
    return tuple(parameters)
